"""
Board coordinate mapping
Projects pixel positions over the rendered board, or normalized landmark
positions from the camera, onto board squares
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

FILES = "abcdefgh"
BOARD_DIM = 8


@dataclass(frozen=True)
class BoardSquare:
    """One of the 64 board squares, file and rank indices in 0..7"""
    file_index: int
    rank_index: int

    def __post_init__(self):
        if not (0 <= self.file_index < BOARD_DIM and 0 <= self.rank_index < BOARD_DIM):
            raise ValueError(
                f"square index out of range: file={self.file_index}, rank={self.rank_index}"
            )

    @property
    def name(self) -> str:
        return f"{FILES[self.file_index]}{self.rank_index + 1}"

    @property
    def index(self) -> int:
        """python-chess square number (a1=0, h8=63)"""
        return self.rank_index * BOARD_DIM + self.file_index

    @classmethod
    def from_name(cls, name: str) -> "BoardSquare":
        if len(name) != 2 or name[0] not in FILES or name[1] not in "12345678":
            raise ValueError(f"invalid square name: {name!r}")
        return cls(FILES.index(name[0]), int(name[1]) - 1)

    @classmethod
    def from_index(cls, index: int) -> "BoardSquare":
        return cls(index % BOARD_DIM, index // BOARD_DIM)

    def __str__(self) -> str:
        return self.name


def _make_square(file_index: int, rank_index: int) -> Optional[BoardSquare]:
    if file_index < 0 or file_index > 7 or rank_index < 0 or rank_index > 7:
        return None
    return BoardSquare(file_index, rank_index)


def square_at(
    pixel_x: float,
    pixel_y: float,
    board_width: float,
    board_height: float
) -> Optional[BoardSquare]:
    """
    Square under a pixel position on the rendered board (white at the bottom)

    Args:
        pixel_x: x relative to the board's left edge
        pixel_y: y relative to the board's top edge
        board_width: rendered board width in pixels
        board_height: rendered board height in pixels

    Returns:
        BoardSquare, or None when the position is off the board
    """
    if board_width <= 0 or board_height <= 0:
        return None

    file_index = math.floor(pixel_x / (board_width / BOARD_DIM))
    rank_index = 7 - math.floor(pixel_y / (board_height / BOARD_DIM))
    return _make_square(file_index, rank_index)


def square_from_normalized(norm_x: float, norm_y: float) -> Optional[BoardSquare]:
    """
    Square under a normalized landmark position

    The camera image is mirrored relative to the board, so x is inverted.
    """
    file_index = math.floor((1 - norm_x) * BOARD_DIM)
    rank_index = 7 - math.floor(norm_y * BOARD_DIM)
    return _make_square(file_index, rank_index)


def board_position_from_normalized(
    norm_x: float,
    norm_y: float,
    board_width: float,
    board_height: float
) -> Tuple[float, float]:
    """Board-relative pixel position of a normalized landmark (mirrored x)"""
    return ((1 - norm_x) * board_width, norm_y * board_height)


def square_rect(
    square: BoardSquare,
    board_width: float,
    board_height: float
) -> Tuple[int, int, int, int]:
    """Pixel rectangle (x0, y0, x1, y1) covered by a square"""
    cell_w = board_width / BOARD_DIM
    cell_h = board_height / BOARD_DIM
    x0 = int(round(square.file_index * cell_w))
    y0 = int(round((7 - square.rank_index) * cell_h))
    x1 = int(round((square.file_index + 1) * cell_w))
    y1 = int(round((8 - square.rank_index) * cell_h))
    return (x0, y0, x1, y1)
