"""
Gesture Chess core
Board mapping, pinch detection, cursor smoothing, game adapter and the gesture state machine
"""

from .board import BoardSquare, square_at, square_from_normalized
from .capture import CameraCapture
from .cursor import CursorSmoother
from .detector import HandDetector, HandObservation
from .game import ChessGame, MoveResult, MoveSubmitter, RandomOpponent
from .pinch import PinchDetector
from .state_machine import GestureStateMachine, GestureView, InteractionState

__all__ = [
    "BoardSquare",
    "square_at",
    "square_from_normalized",
    "CameraCapture",
    "CursorSmoother",
    "HandDetector",
    "HandObservation",
    "ChessGame",
    "MoveResult",
    "MoveSubmitter",
    "RandomOpponent",
    "PinchDetector",
    "GestureStateMachine",
    "GestureView",
    "InteractionState"
]
