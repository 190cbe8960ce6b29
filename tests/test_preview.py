import numpy as np
import pytest

from gesture_chess.config.settings import Config
from gesture_chess.core.board import BoardSquare
from gesture_chess.core.state_machine import GestureView
from gesture_chess.preview import (
    ArrowCursor,
    DotCursor,
    PANEL_HEIGHT,
    PreviewWindow,
    make_cursor,
    render_board,
)
from gesture_chess.session import GestureChessSession


def test_cursor_styles():
    assert isinstance(make_cursor("arrow"), ArrowCursor)
    assert isinstance(make_cursor("dot"), DotCursor)
    with pytest.raises(ValueError):
        make_cursor("laser")


@pytest.mark.parametrize("style", ["arrow", "dot"])
def test_render_board_while_dragging(style):
    session = GestureChessSession(Config())
    view = GestureView(
        status="Dragging: e2 -> e4",
        highlighted_square=BoardSquare.from_name("e4"),
        cursor=(290.0, 290.0),
        dragging=True,
        drag_origin=BoardSquare.from_name("e2"),
    )
    canvas = render_board(session.game.board, view, 320, make_cursor(style))
    assert canvas.shape == (320, 320, 3)
    assert canvas.any()


def test_compose_layout_without_camera_image():
    config = Config()
    config.board.size_px = 320
    window = PreviewWindow(GestureChessSession(config), cursor_style="dot")
    out = window.compose(None)
    assert out.shape == (320 + PANEL_HEIGHT, 320 + 240, 3)


def test_compose_with_camera_image():
    config = Config()
    config.board.size_px = 320
    window = PreviewWindow(GestureChessSession(config))
    image = np.zeros((480, 640, 3), dtype=np.uint8)
    out = window.compose(image)
    assert out.shape == (320 + PANEL_HEIGHT, 560, 3)
