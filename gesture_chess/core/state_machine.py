"""
Gesture state machine
Turns per-frame hand observations into grab / drag / release / lost events
and submits a move on every valid release
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import chess

from .board import BoardSquare, board_position_from_normalized, square_at
from .cursor import CursorSmoother
from .detector import HandObservation
from .game import ChessGame, MoveResult, MoveSubmitter, color_name
from .pinch import PinchDetector

logger = logging.getLogger(__name__)


class InteractionState(Enum):
    """Interaction state"""
    IDLE = "idle"           # pointing, nothing held
    DRAGGING = "dragging"   # a piece is held
    LOST = "lost"           # no hand for longer than the timeout


@dataclass
class DragSession:
    """A piece being virtually held, from grab to release"""
    origin: BoardSquare
    started_at: float
    active: bool = True


@dataclass
class GestureEvent:
    """A discrete gesture event"""
    event_type: str          # grab | grab_rejected | drag | release | move | move_rejected
                             # | drop_same_square | drop_off_board | lost | cancel | recovered
    timestamp: float
    square: Optional[BoardSquare] = None
    origin: Optional[BoardSquare] = None
    message: str = ""
    meta: Dict = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            "square": self.square.name if self.square else None,
            "origin": self.origin.name if self.origin else None,
            "message": self.message,
            "meta": self.meta
        }


@dataclass(frozen=True)
class GestureView:
    """Everything a front end needs to render the gesture state"""
    status: str
    highlighted_square: Optional[BoardSquare]
    cursor: Optional[Tuple[float, float]]
    dragging: bool
    drag_origin: Optional[BoardSquare]
    state: InteractionState = InteractionState.IDLE
    pinching: bool = False
    feedback: str = ""

    def to_dict(self) -> Dict:
        return {
            "status": self.status,
            "highlighted_square": self.highlighted_square.name if self.highlighted_square else None,
            "cursor": list(self.cursor) if self.cursor else None,
            "dragging": self.dragging,
            "drag_origin": self.drag_origin.name if self.drag_origin else None,
            "state": self.state.value,
            "pinching": self.pinching,
            "feedback": self.feedback
        }


class GestureStateMachine:
    """
    Pinch-to-grab / release-to-drop state machine

    One instance per player. All cross-frame memory lives on the instance,
    so several machines can run side by side (replays, tests).
    """

    def __init__(
        self,
        game: ChessGame,
        submitter: Optional[MoveSubmitter] = None,
        pinch: Optional[PinchDetector] = None,
        smoother: Optional[CursorSmoother] = None,
        human_color: chess.Color = chess.WHITE,
        board_size: Tuple[float, float] = (640, 640),
        lost_timeout_ms: float = 1500,
        grab_cooldown_ms: float = 300
    ):
        self.game = game
        self.submitter = submitter or MoveSubmitter(game)
        self.pinch = pinch or PinchDetector()
        self.smoother = smoother or CursorSmoother()
        self.human_color = human_color
        self.board_size = board_size
        self.lost_timeout_ms = lost_timeout_ms
        self.grab_cooldown_ms = grab_cooldown_ms

        self.state = InteractionState.IDLE
        self.status = "Waiting for hand detection..."
        self.feedback = ""
        self.highlighted_square: Optional[BoardSquare] = None
        self.cursor: Optional[Tuple[float, float]] = None
        self.raw_cursor: Optional[Tuple[float, float]] = None
        self.last_move: Optional[MoveResult] = None

        self._session: Optional[DragSession] = None
        self._drag_target: Optional[BoardSquare] = None
        self._was_pinching = False
        self._last_seen_ms: Optional[float] = None
        self._last_grab_ms: Optional[float] = None

        self._callbacks: List[Callable[[GestureEvent], None]] = []

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    def register_callback(self, callback: Callable[[GestureEvent], None]):
        """Register an event callback"""
        self._callbacks.append(callback)

    def _emit_event(self, event: GestureEvent):
        for callback in self._callbacks:
            try:
                callback(event)
            except Exception:
                logger.exception("gesture event callback failed (%s)", event.event_type)

    def tick(self, hand: Optional[HandObservation], now: Optional[float] = None) -> GestureView:
        """
        Process one frame

        Args:
            hand: the tracked hand, or None when no hand was detected
            now: frame timestamp (ms), defaults to the monotonic clock

        Returns:
            GestureView after this frame
        """
        if now is None:
            now = time.monotonic() * 1000

        if hand is None:
            self._on_no_hand(now)
            return self.view()

        self._last_seen_ms = now
        if self.state == InteractionState.LOST:
            self.state = InteractionState.IDLE
            logger.info("hand detected again")
            self._emit_event(GestureEvent("recovered", now))

        # Square resolution uses the raw sample; the smoothed one is for display
        width, height = self.board_size
        index_tip = hand.index_tip
        raw = board_position_from_normalized(float(index_tip[0]), float(index_tip[1]), width, height)
        square = square_at(raw[0], raw[1], width, height)
        self.raw_cursor = raw
        self.cursor = self.smoother.update(raw)
        self.highlighted_square = square

        pinching = self.pinch.update(hand.thumb_tip, index_tip, now)
        pressed = pinching and not self._was_pinching
        released = self._was_pinching and not pinching
        self._was_pinching = pinching

        if self.state == InteractionState.DRAGGING:
            if released:
                self._release(square, now)
            else:
                self._drag(square, now)
        elif pressed:
            self._try_grab(square, now)
        elif not pinching:
            self._point(square)

        return self.view()

    def _on_no_hand(self, now: float):
        if self._last_seen_ms is None:
            self._last_seen_ms = now

        if self.state == InteractionState.LOST:
            return
        if now - self._last_seen_ms <= self.lost_timeout_ms:
            return

        cancelled = self._session
        self._close_session()
        self.state = InteractionState.LOST
        self.cursor = None
        self.raw_cursor = None
        self.highlighted_square = None
        self.smoother.reset()

        if cancelled is not None:
            self.status = "Drag cancelled - hand lost"
            self.feedback = self.status
            logger.info("hand lost while dragging from %s, drag cancelled", cancelled.origin)
            self._emit_event(GestureEvent("cancel", now, origin=cancelled.origin, message=self.status))
        else:
            self.status = "No hand detected"
            logger.info("hand lost")
        self._emit_event(GestureEvent("lost", now, message=self.status))

    def _point(self, square: Optional[BoardSquare]):
        if square is None:
            self.status = "Point at the board"
            return

        piece = self.game.piece_at(square)
        if piece is not None and piece.color == self.human_color and self.game.turn() == self.human_color:
            self.status = f"{piece.name} on {square} - pinch to grab"
        else:
            self.status = f"Square {square}"

    def _try_grab(self, square: Optional[BoardSquare], now: float):
        if self._last_grab_ms is not None and now - self._last_grab_ms < self.grab_cooldown_ms:
            logger.debug("grab attempt ignored (cooldown)")
            return
        self._last_grab_ms = now

        reason = None
        if square is None:
            self.status = "Point at the board"
            reason = "off_board"
        elif self.game.is_game_over():
            self.status = "Game over - start a new game"
            reason = "game_over"
        else:
            piece = self.game.piece_at(square)
            if piece is None:
                self.status = f"No piece on {square}"
                reason = "empty"
            elif piece.color != self.human_color:
                self.status = f"That piece is not yours - you play {color_name(self.human_color)}"
                reason = "opponent_piece"
            elif self.game.turn() != self.human_color:
                self.status = "Wait for your turn"
                reason = "not_your_turn"

        if reason is not None:
            self._emit_event(GestureEvent(
                "grab_rejected", now, square=square, message=self.status, meta={"reason": reason}
            ))
            return

        if self._open_session(square, now):
            self.state = InteractionState.DRAGGING
            self.status = f"Dragging from {square}"
            logger.info("grabbed piece on %s", square)
            self._emit_event(GestureEvent("grab", now, square=square, origin=square, message=self.status))

    def _drag(self, square: Optional[BoardSquare], now: float):
        origin = self._session.origin
        if square is not None and square != origin:
            self.status = f"Dragging: {origin} -> {square}"
        else:
            self.status = f"Dragging from {origin}"

        if square != self._drag_target:
            self._drag_target = square
            self._emit_event(GestureEvent("drag", now, square=square, origin=origin))

    def _release(self, square: Optional[BoardSquare], now: float):
        origin = self._session.origin
        self._close_session()
        self.state = InteractionState.IDLE
        self._emit_event(GestureEvent("release", now, square=square, origin=origin))

        if square is None:
            self.status = "Dropped off the board"
            event_type = "drop_off_board"
        elif square == origin:
            self.status = "Dropped on the same square"
            event_type = "drop_same_square"
        else:
            result = self.submitter.submit(origin, square)
            self.last_move = result
            self.status = self.submitter.last_message
            event_type = "move" if result.accepted else "move_rejected"

        self.feedback = self.status
        self._emit_event(GestureEvent(event_type, now, square=square, origin=origin, message=self.status))

    def _open_session(self, origin: BoardSquare, now: float) -> bool:
        if self._session is not None:
            logger.warning("drag already active from %s, ignoring grab on %s", self._session.origin, origin)
            return False
        self._session = DragSession(origin=origin, started_at=now)
        self._drag_target = origin
        return True

    def _close_session(self):
        if self._session is not None:
            self._session.active = False
        self._session = None
        self._drag_target = None

    def view(self) -> GestureView:
        return GestureView(
            status=self.status,
            highlighted_square=self.highlighted_square,
            cursor=self.cursor,
            dragging=self._session is not None,
            drag_origin=self._session.origin if self._session else None,
            state=self.state,
            pinching=self.pinch.is_pinching,
            feedback=self.feedback
        )

    def reset(self):
        """Back to Idle, dropping any held piece (used on a new game)"""
        self._close_session()
        self.pinch.reset()
        self.smoother.reset()
        self.state = InteractionState.IDLE
        self.status = "New game!"
        self.feedback = ""
        self.highlighted_square = None
        self.cursor = None
        self.raw_cursor = None
        self.last_move = None
        self._was_pinching = False
        self._last_seen_ms = None
        self._last_grab_ms = None
