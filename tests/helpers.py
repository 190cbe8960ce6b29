"""Builders for synthetic hand observations"""

from typing import Optional, Tuple

import numpy as np

from gesture_chess.core.board import BoardSquare
from gesture_chess.core.detector import HandObservation

OPEN_GAP = 0.15
PINCH_GAP = 0.01


def normalized_center(name: str) -> Tuple[float, float]:
    """Normalized landmark position that maps onto the centre of a square"""
    square = BoardSquare.from_name(name)
    norm_x = 1 - (square.file_index + 0.5) / 8
    norm_y = (7 - square.rank_index + 0.5) / 8
    return norm_x, norm_y


def hand_at(
    index_xy: Tuple[float, float],
    pinched: bool,
    thumb_offset: Optional[float] = None
) -> HandObservation:
    landmarks = np.zeros((21, 3), dtype=float)
    landmarks[:, 0] = index_xy[0]
    landmarks[:, 1] = index_xy[1]
    gap = thumb_offset if thumb_offset is not None else (PINCH_GAP if pinched else OPEN_GAP)
    landmarks[4] = [index_xy[0] + gap, index_xy[1], 0.0]
    landmarks[8] = [index_xy[0], index_xy[1], 0.0]
    return HandObservation(landmarks=landmarks, handedness="Right", confidence=0.9)


def hand_on(name: str, pinched: bool) -> HandObservation:
    return hand_at(normalized_center(name), pinched)
