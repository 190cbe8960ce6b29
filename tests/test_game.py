import random

import chess
import pytest

from gesture_chess.core.board import BoardSquare
from gesture_chess.core.game import (
    ChessGame,
    MoveSubmitter,
    RandomOpponent,
    color_name,
    parse_color,
)

STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
PROMOTION_FEN = "8/P6k/8/8/8/8/8/K7 w - - 0 1"


def sq(name):
    return BoardSquare.from_name(name)


def play_fools_mate(game):
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        game.play(chess.Move.from_uci(uci))


def test_piece_at_reads_the_position():
    game = ChessGame()
    pawn = game.piece_at(sq("e2"))
    assert pawn.piece_type == chess.PAWN
    assert pawn.color == chess.WHITE
    assert pawn.name == "White pawn"
    assert game.piece_at(sq("e7")).color == chess.BLACK
    assert game.piece_at(sq("e4")) is None


def test_legal_move_is_applied():
    game = ChessGame()
    result = game.apply_move(sq("e2"), sq("e4"))
    assert result.accepted
    assert result.san == "e4"
    assert result.uci == "e2e4"
    assert game.turn() == chess.BLACK
    assert game.piece_at(sq("e4")).piece_type == chess.PAWN
    assert game.move_count() == 1


def test_illegal_move_leaves_position_unchanged():
    game = ChessGame()
    before = game.fen()
    result = game.apply_move(sq("e2"), sq("e5"))
    assert not result.accepted
    assert result.san is None
    assert game.fen() == before
    assert game.turn() == chess.WHITE


def test_pawn_promotes_to_queen_by_default():
    game = ChessGame(PROMOTION_FEN)
    assert game.needs_promotion(sq("a7"), sq("a8"))
    result = game.apply_move(sq("a7"), sq("a8"))
    assert result.accepted
    assert result.promotion == chess.QUEEN
    assert result.uci == "a7a8q"
    assert game.piece_at(sq("a8")).piece_type == chess.QUEEN


def test_status_text():
    game = ChessGame()
    assert game.status_text("Your move") == "Your move"

    play_fools_mate(game)
    assert game.is_checkmate()
    assert game.is_game_over()
    assert game.status_text("x") == "Checkmate! Black wins"

    check = ChessGame("4k3/8/8/8/8/8/8/4K2R b - - 0 1")
    assert not check.in_check()
    check = ChessGame("4k3/8/8/8/8/8/8/4R1K1 b - - 0 1")
    assert check.in_check()
    assert check.status_text("x") == "Check!"

    stalemate = ChessGame(STALEMATE_FEN)
    assert stalemate.is_draw()
    assert stalemate.is_game_over()
    assert stalemate.status_text("x") == "Draw"


def test_reset():
    game = ChessGame()
    game.apply_move(sq("e2"), sq("e4"))
    game.reset()
    assert game.fen() == chess.STARTING_FEN
    assert game.move_count() == 0


def test_submitter_messages():
    game = ChessGame()
    submitter = MoveSubmitter(game)

    assert not submitter.submit(sq("e2"), sq("e5")).accepted
    assert submitter.last_message == "Invalid move: e2 -> e5"

    assert submitter.submit(sq("e2"), sq("e4")).accepted
    assert submitter.last_message == "Move made: e2 -> e4"


def test_opponent_waits_for_its_turn_and_think_delay():
    game = ChessGame()
    opponent = RandomOpponent(game, color=chess.BLACK, think_delay_ms=800, rng=random.Random(1))

    assert opponent.tick(0) is None            # white to move
    assert not opponent.is_thinking

    game.apply_move(sq("e2"), sq("e4"))
    assert opponent.tick(1000) is None         # starts thinking
    assert opponent.is_thinking
    assert opponent.tick(1799) is None
    result = opponent.tick(1800)

    assert result is not None and result.accepted
    assert game.turn() == chess.WHITE
    assert game.piece_at(result.target).color == chess.BLACK
    assert opponent.last_message == f"Opponent played {result.uci} - your turn"


def test_opponent_is_deterministic_with_a_seeded_rng():
    played = []
    for _ in range(2):
        game = ChessGame()
        game.apply_move(sq("d2"), sq("d4"))
        opponent = RandomOpponent(game, think_delay_ms=0, rng=random.Random(42))
        opponent.tick(0)
        played.append(opponent.tick(0).uci)
    assert played[0] == played[1]


def test_opponent_does_nothing_when_game_is_over():
    game = ChessGame(STALEMATE_FEN)
    opponent = RandomOpponent(game, color=chess.BLACK, think_delay_ms=0)
    assert opponent.tick(0) is None
    assert opponent.tick(10) is None
    assert game.fen() == ChessGame(STALEMATE_FEN).fen()


@pytest.mark.parametrize("name, color", [
    ("white", chess.WHITE), ("White", chess.WHITE), ("w", chess.WHITE),
    ("black", chess.BLACK), (" b ", chess.BLACK),
])
def test_parse_color(name, color):
    assert parse_color(name) == color


def test_parse_color_rejects_unknown():
    with pytest.raises(ValueError):
        parse_color("red")
    assert color_name(chess.BLACK) == "Black"
