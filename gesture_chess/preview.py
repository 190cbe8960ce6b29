"""
OpenCV preview window
Board, camera feed and status text; the cursor drawing is pluggable
"""

import logging
from typing import Dict, List, Optional, Tuple

import chess
import cv2
import numpy as np

from .core.board import BoardSquare, square_rect
from .core.game import color_name
from .core.state_machine import GestureView
from .session import GestureChessSession

logger = logging.getLogger(__name__)

# BGR
LIGHT_SQUARE = (181, 217, 240)
DARK_SQUARE = (99, 136, 181)
HIGHLIGHT = (0, 215, 255)
SELECTED = (94, 197, 34)
BACKGROUND = (50, 50, 50)
TEXT = (255, 255, 255)
GREEN = (0, 220, 0)

PANEL_HEIGHT = 150

# Hand-shaped arrow, relative to the cursor hot spot
_ARROW = np.array(
    [(14, 4), (14, 30), (22, 22), (26, 34), (32, 30), (26, 18), (36, 18)], dtype=np.int32
) - np.array([22, 22], dtype=np.int32)


class ArrowCursor:
    """Hand-cursor variant: white arrow, green while a piece is held"""

    def draw(self, canvas: np.ndarray, pos: Tuple[int, int], view: GestureView):
        pts = _ARROW + np.array(pos, dtype=np.int32)
        fill = (94, 197, 34) if view.dragging else (255, 255, 255)
        outline = (74, 163, 22) if view.dragging else (246, 130, 59)
        cv2.fillPoly(canvas, [pts + 2], (0, 0, 0))
        cv2.fillPoly(canvas, [pts], fill)
        cv2.polylines(canvas, [pts], True, outline, 2, cv2.LINE_AA)
        if view.dragging:
            cv2.circle(canvas, (pos[0], pos[1] - 12), 5, (94, 197, 34), -1, cv2.LINE_AA)
            cv2.circle(canvas, (pos[0], pos[1] - 12), 3, (255, 255, 255), -1, cv2.LINE_AA)


class DotCursor:
    """Dot-cursor variant: red ring, filled green while a piece is held"""

    def draw(self, canvas: np.ndarray, pos: Tuple[int, int], view: GestureView):
        if view.dragging:
            cv2.circle(canvas, pos, 10, GREEN, -1, cv2.LINE_AA)
        cv2.circle(canvas, pos, 10, (0, 0, 255), 3, cv2.LINE_AA)
        cv2.circle(canvas, pos, 8, (255, 255, 255), 2, cv2.LINE_AA)


CURSOR_STYLES: Dict[str, type] = {
    "arrow": ArrowCursor,
    "dot": DotCursor,
}


def make_cursor(style: str):
    try:
        return CURSOR_STYLES[style]()
    except KeyError:
        raise ValueError(f"unknown cursor style {style!r}, choose from {sorted(CURSOR_STYLES)}")


def _draw_text(canvas, text: str, org: Tuple[int, int], color=TEXT, scale=0.6, thickness=2):
    cv2.putText(canvas, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(canvas, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)


def render_board(board: chess.Board, view: GestureView, size: int, cursor) -> np.ndarray:
    """Board with pieces as letters, highlight, drag origin and cursor"""
    canvas = np.zeros((size, size, 3), dtype=np.uint8)

    for index in chess.SQUARES:
        square = BoardSquare.from_index(index)
        x0, y0, x1, y1 = square_rect(square, size, size)
        light = (square.file_index + square.rank_index) % 2 == 1
        color = LIGHT_SQUARE if light else DARK_SQUARE
        if square == view.drag_origin:
            color = SELECTED
        cv2.rectangle(canvas, (x0, y0), (x1 - 1, y1 - 1), color, -1)
        if square == view.highlighted_square:
            cv2.rectangle(canvas, (x0 + 2, y0 + 2), (x1 - 3, y1 - 3), HIGHLIGHT, 4)

        piece = board.piece_at(index)
        if piece is not None:
            letter = piece.symbol().upper() if piece.color == chess.WHITE else piece.symbol().lower()
            fg = (255, 255, 255) if piece.color == chess.WHITE else (0, 0, 0)
            scale = (x1 - x0) / 50
            (tw, th), _ = cv2.getTextSize(letter, cv2.FONT_HERSHEY_DUPLEX, scale, 2)
            org = (x0 + (x1 - x0 - tw) // 2, y0 + (y1 - y0 + th) // 2)
            cv2.putText(canvas, letter, org, cv2.FONT_HERSHEY_DUPLEX, scale, fg, 2, cv2.LINE_AA)

    if view.cursor is not None:
        cursor.draw(canvas, (int(view.cursor[0]), int(view.cursor[1])), view)

    if view.dragging and view.drag_origin and view.highlighted_square \
            and view.drag_origin != view.highlighted_square and view.cursor is not None:
        label = f"{view.drag_origin} -> {view.highlighted_square}"
        _draw_text(canvas, label, (int(view.cursor[0]) - 40, int(view.cursor[1]) - 30), GREEN, 0.55, 2)

    return canvas


def render_camera(
    session: GestureChessSession,
    image: Optional[np.ndarray],
    width: int,
    height: int
) -> np.ndarray:
    """Camera image with landmarks and the 8x8 grid, mirrored for display"""
    if image is None:
        return np.full((height, width, 3), BACKGROUND, dtype=np.uint8)

    output = image
    if session.detector is not None and session.last_hands:
        output = session.detector.draw_landmarks(image, session.last_hands)

    # Display only; detection always sees the unflipped frame
    output = cv2.resize(cv2.flip(output, 1), (width, height))
    for i in range(1, 8):
        x = i * width // 8
        y = i * height // 8
        cv2.line(output, (x, 0), (x, height), (200, 200, 200), 1)
        cv2.line(output, (0, y), (width, y), (200, 200, 200), 1)
    return output


def render_status(session: GestureChessSession, width: int) -> np.ndarray:
    panel = np.full((PANEL_HEIGHT, width, 3), BACKGROUND, dtype=np.uint8)
    view = session.view
    game = session.game

    turn = "You" if game.turn() == session.human_color else "Opponent"
    drag = f"Dragging from {view.drag_origin}" if view.dragging else "Ready to move"
    lines: List[Tuple[str, Tuple[int, int, int]]] = [
        (view.status, (120, 230, 120)),
        (session.game_status, (0, 215, 255)),
        (f"Moves: {game.move_count()}  |  Turn: {turn} ({color_name(game.turn())})  |  {drag}", TEXT),
        ("Point, pinch to grab, hold to drag, open to drop  |  r: new game  q: quit", (180, 180, 180)),
    ]

    y = 30
    for text, color in lines:
        _draw_text(panel, text, (12, y), color, 0.6, 1)
        y += 32
    return panel


class PreviewWindow:
    """
    Frame callback for GestureChessSession.run()
    Returns False from __call__ when the user quits
    """

    def __init__(self, session: GestureChessSession, cursor_style: str = "arrow", window_name: str = "Gesture Chess"):
        self.session = session
        self.cursor = make_cursor(cursor_style)
        self.window_name = window_name

    def compose(self, image: Optional[np.ndarray]) -> np.ndarray:
        size = self.session.config.board.size_px
        board = render_board(self.session.game.board, self.session.view, size, self.cursor)
        camera = render_camera(self.session, image, size * 3 // 4, size)
        top = np.hstack([board, camera])
        return np.vstack([top, render_status(self.session, top.shape[1])])

    def __call__(self, image: np.ndarray, view: GestureView) -> bool:
        cv2.imshow(self.window_name, self.compose(image))
        key = cv2.waitKey(1) & 0xFF
        if key in (ord("q"), 27):
            return False
        if key == ord("r"):
            self.session.new_game()
        return True
