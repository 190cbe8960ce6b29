"""
Chess game adapter, move submission and the random opponent
The rules themselves come from python-chess
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

import chess

from .board import BoardSquare

logger = logging.getLogger(__name__)


def parse_color(name: str) -> chess.Color:
    """'white' / 'black' -> chess.WHITE / chess.BLACK"""
    key = name.strip().lower()
    if key in ("white", "w"):
        return chess.WHITE
    if key in ("black", "b"):
        return chess.BLACK
    raise ValueError(f"unknown side: {name!r}")


def color_name(color: chess.Color) -> str:
    return "White" if color == chess.WHITE else "Black"


@dataclass(frozen=True)
class PieceInfo:
    """A piece read from the position"""
    piece_type: chess.PieceType
    color: chess.Color
    symbol: str

    @property
    def name(self) -> str:
        return f"{color_name(self.color)} {chess.piece_name(self.piece_type)}"


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a move attempt"""
    accepted: bool
    origin: BoardSquare
    target: BoardSquare
    san: Optional[str] = None
    promotion: Optional[chess.PieceType] = None

    @property
    def uci(self) -> str:
        suffix = chess.piece_symbol(self.promotion) if self.promotion else ""
        return f"{self.origin.name}{self.target.name}{suffix}"


class ChessGame:
    """
    Thin adapter over chess.Board
    The board is only ever written through apply_move / play / reset
    """

    def __init__(self, fen: Optional[str] = None):
        self._board = chess.Board(fen) if fen else chess.Board()

    @property
    def board(self) -> chess.Board:
        """Read-only use; call apply_move to change the position"""
        return self._board

    def fen(self) -> str:
        return self._board.fen()

    def turn(self) -> chess.Color:
        return self._board.turn

    def piece_at(self, square: BoardSquare) -> Optional[PieceInfo]:
        piece = self._board.piece_at(square.index)
        if piece is None:
            return None
        return PieceInfo(piece_type=piece.piece_type, color=piece.color, symbol=piece.symbol())

    def is_game_over(self) -> bool:
        return self._board.is_game_over(claim_draw=True)

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def is_draw(self) -> bool:
        outcome = self._board.outcome(claim_draw=True)
        return outcome is not None and outcome.winner is None

    def in_check(self) -> bool:
        return self._board.is_check()

    def legal_moves(self) -> List[chess.Move]:
        return list(self._board.legal_moves)

    def move_count(self) -> int:
        return len(self._board.move_stack)

    def needs_promotion(self, origin: BoardSquare, target: BoardSquare) -> bool:
        piece = self._board.piece_at(origin.index)
        if piece is None or piece.piece_type != chess.PAWN:
            return False
        last_rank = 7 if piece.color == chess.WHITE else 0
        return target.rank_index == last_rank

    def apply_move(
        self,
        origin: BoardSquare,
        target: BoardSquare,
        promotion: Optional[chess.PieceType] = None
    ) -> MoveResult:
        """
        Try to play origin -> target

        Pawns reaching the last rank promote to `promotion`, or to a queen
        when none is given. Illegal moves leave the position untouched.
        """
        if promotion is None and self.needs_promotion(origin, target):
            promotion = chess.QUEEN
        move = chess.Move(origin.index, target.index, promotion=promotion)

        if move not in self._board.legal_moves:
            return MoveResult(accepted=False, origin=origin, target=target)

        san = self._board.san(move)
        self._board.push(move)
        return MoveResult(
            accepted=True,
            origin=origin,
            target=target,
            san=san,
            promotion=promotion
        )

    def play(self, move: chess.Move) -> MoveResult:
        return self.apply_move(
            BoardSquare.from_index(move.from_square),
            BoardSquare.from_index(move.to_square),
            move.promotion
        )

    def reset(self):
        self._board.reset()

    def status_text(self, default: str) -> str:
        """Game-level status: checkmate, draw, check, otherwise `default`"""
        if self._board.is_checkmate():
            winner = color_name(not self._board.turn)
            return f"Checkmate! {winner} wins"
        if self.is_draw():
            return "Draw"
        if self._board.is_check():
            return "Check!"
        return default


class MoveSubmitter:
    """
    The single path from gestures to the game position
    """

    def __init__(self, game: ChessGame):
        self.game = game
        self.last_message = ""

    def submit(self, origin: BoardSquare, target: BoardSquare) -> MoveResult:
        result = self.game.apply_move(origin, target)
        if result.accepted:
            self.last_message = f"Move made: {origin} -> {target}"
            logger.info("move accepted: %s (%s)", result.uci, result.san)
        else:
            self.last_message = f"Invalid move: {origin} -> {target}"
            logger.info("move rejected: %s -> %s", origin, target)
        return result


class RandomOpponent:
    """
    Plays a uniformly random legal move after a think delay
    Driven by tick(now) from the frame loop
    """

    def __init__(
        self,
        game: ChessGame,
        color: chess.Color = chess.BLACK,
        think_delay_ms: float = 800,
        rng: Optional[random.Random] = None
    ):
        self.game = game
        self.color = color
        self.think_delay_ms = think_delay_ms
        self._rng = rng or random.Random()
        self._due_ms: Optional[float] = None
        self.last_message = ""

    @property
    def is_thinking(self) -> bool:
        return self._due_ms is not None

    def tick(self, now: float) -> Optional[MoveResult]:
        if self.game.turn() != self.color or self.game.is_game_over():
            self._due_ms = None
            return None

        if self._due_ms is None:
            self._due_ms = now + self.think_delay_ms
            return None

        if now < self._due_ms:
            return None

        self._due_ms = None
        moves = self.game.legal_moves()
        if not moves:
            return None

        result = self.game.play(self._rng.choice(moves))
        self.last_message = f"Opponent played {result.uci} - your turn"
        logger.info("opponent move: %s (%s)", result.uci, result.san)
        return result

    def reset(self):
        self._due_ms = None
        self.last_message = ""
