#!/usr/bin/env python3
"""
Gesture Chess - play chess with hand gestures
Main entry point

Usage:
    python -m gesture_chess.main              # camera + preview window
    python -m gesture_chess.main --cursor dot # dot cursor instead of the hand arrow
    python -m gesture_chess.main --test       # smoke-test camera, detector and game
"""

import argparse
import asyncio
import logging
import sys

import cv2

from .config.settings import Config

logger = logging.getLogger("gesture_chess")


def run_preview_mode(config: Config) -> int:
    """Camera loop with the OpenCV preview window"""
    from .core.capture import CameraCapture
    from .preview import PreviewWindow
    from .session import GestureChessSession

    camera = CameraCapture(
        device_id=config.camera.device_id,
        width=config.camera.width,
        height=config.camera.height,
        fps=config.camera.fps
    )
    if not camera.start():
        logger.error("cannot start camera %d", config.camera.device_id)
        return 1

    session = GestureChessSession(config)
    preview = PreviewWindow(session, cursor_style=config.cursor.style)

    async def _run():
        await session.start()
        try:
            await session.run(camera.read_generator(), preview)
        finally:
            await session.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        camera.stop()
        cv2.destroyAllWindows()

    return 0


def run_test_mode(config: Config) -> int:
    """Smoke-test each component against the real camera and model"""
    import numpy as np

    from .core.board import BoardSquare
    from .core.capture import CameraCapture
    from .core.detector import HandDetector
    from .core.game import ChessGame
    from .core.state_machine import GestureStateMachine

    ok = True

    print("\n[TEST] camera...")
    camera = CameraCapture(device_id=config.camera.device_id)
    if camera.start():
        frame = camera.read()
        if frame:
            print(f"  ok: {frame.width}x{frame.height}")
        else:
            print("  FAILED: no frame")
            ok = False
        camera.stop()
    else:
        print("  FAILED: cannot open camera")
        ok = False

    print("\n[TEST] hand detector...")
    try:
        with HandDetector(config.detector.model_path, config.detector.model_url) as detector:
            hands = detector.detect(np.zeros((480, 640, 3), dtype=np.uint8), 0)
            print(f"  ok: {len(hands)} hands on a blank frame")
    except RuntimeError as e:
        print(f"  FAILED: {e}")
        ok = False

    print("\n[TEST] game + state machine...")
    game = ChessGame()
    result = game.apply_move(BoardSquare.from_name("e2"), BoardSquare.from_name("e4"))
    sm = GestureStateMachine(game)
    view = sm.tick(None, 0)
    print(f"  ok: e2e4 accepted={result.accepted}, state={view.state.value}")

    print("\n" + ("all checks passed" if ok else "some checks failed"))
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gesture-chess",
        description="Gesture Chess - move pieces by pinching in front of the webcam",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
    gesture-chess                       play as white with the hand cursor
    gesture-chess --human black         play as black
    gesture-chess --cursor dot          dot cursor
    gesture-chess --test                check camera, model and game
        """
    )
    parser.add_argument("--test", "-t", action="store_true", help="run the smoke test")
    parser.add_argument("--camera", "-c", type=int, default=0, help="camera device id (default: 0)")
    parser.add_argument("--human", choices=["white", "black"], default="white", help="side you play")
    parser.add_argument("--cursor", choices=["arrow", "dot"], default="arrow", help="cursor style")
    parser.add_argument("--board-size", type=int, default=640, help="board size in pixels")
    parser.add_argument("--pinch-threshold", type=float, default=None,
                        help="pinch distance threshold in normalized units")
    parser.add_argument("--seed", type=int, default=None, help="opponent random seed")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = Config()
    config.camera.device_id = args.camera
    config.board.human_color = args.human
    config.board.size_px = args.board_size
    config.cursor.style = args.cursor
    config.opponent.seed = args.seed
    config.log_level = args.log_level
    if args.pinch_threshold is not None:
        config.pinch.threshold = args.pinch_threshold

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.test:
        return run_test_mode(config)
    return run_preview_mode(config)


if __name__ == "__main__":
    sys.exit(main())
