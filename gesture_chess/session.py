"""
Game session
One-time detector setup, the per-frame tick and the cancellable frame loop
"""

import asyncio
import logging
import random
import time
from typing import Callable, Iterable, List, Optional, Union

import numpy as np

from .config.settings import Config, default_config
from .core.capture import Frame
from .core.cursor import CursorSmoother
from .core.detector import HandDetector, HandObservation
from .core.game import ChessGame, MoveSubmitter, RandomOpponent, color_name, parse_color
from .core.pinch import PinchDetector
from .core.state_machine import GestureEvent, GestureStateMachine, GestureView

logger = logging.getLogger(__name__)

FrameCallback = Callable[[np.ndarray, GestureView], bool]


class GestureChessSession:
    """
    Ties detector, state machine, game and opponent together

    Usage:
        session = GestureChessSession(config)
        await session.start()
        await session.run(frames, on_frame)
        await session.stop()
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        game: Optional[ChessGame] = None,
        detector_factory: Optional[Callable[[], HandDetector]] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        self.config = config or default_config
        self.game = game or ChessGame()
        self.human_color = parse_color(self.config.board.human_color)
        self.clock = clock or (lambda: time.monotonic() * 1000)
        self._detector_factory = detector_factory or self._create_detector

        self.detector: Optional[HandDetector] = None
        self.gesture_enabled = False
        self.init_error: Optional[str] = None

        size = self.config.board.size_px
        self.state_machine = GestureStateMachine(
            self.game,
            submitter=MoveSubmitter(self.game),
            pinch=PinchDetector(
                threshold=self.config.pinch.threshold,
                cooldown_ms=self.config.pinch.cooldown_ms,
                use_depth=self.config.pinch.use_depth
            ),
            smoother=CursorSmoother(self.config.cursor.smoothing_alpha),
            human_color=self.human_color,
            board_size=(size, size),
            lost_timeout_ms=self.config.tracking.lost_timeout_ms,
            grab_cooldown_ms=self.config.tracking.grab_cooldown_ms
        )
        self.state_machine.register_callback(self._on_gesture_event)

        self.opponent = RandomOpponent(
            self.game,
            color=not self.human_color,
            think_delay_ms=self.config.opponent.think_delay_ms,
            rng=random.Random(self.config.opponent.seed)
        )

        self.message = self._new_game_message()
        self.last_hands: List[HandObservation] = []
        self.view: GestureView = self.state_machine.view()

        self._running = False
        self._processing_task: Optional[asyncio.Task] = None
        self._detector_closed = False
        self._frame_count = 0

    def _create_detector(self) -> HandDetector:
        dc = self.config.detector
        return HandDetector(
            model_path=dc.model_path,
            model_url=dc.model_url,
            num_hands=dc.num_hands,
            min_detection_confidence=dc.min_detection_confidence,
            min_presence_confidence=dc.min_presence_confidence,
            min_tracking_confidence=dc.min_tracking_confidence
        )

    def _new_game_message(self) -> str:
        return f"New game! You play {color_name(self.human_color)}"

    async def start(self) -> bool:
        """
        Load the hand detector

        Returns:
            False when loading failed; the session then runs without gesture input
        """
        logger.info("loading hand detector...")
        try:
            self.detector = await asyncio.to_thread(self._detector_factory)
        except Exception as e:
            logger.exception("hand detector failed to load")
            self.gesture_enabled = False
            self.init_error = str(e)
            self.state_machine.status = f"Hand tracking unavailable: {e}"
            self.view = self.state_machine.view()
            return False

        self.gesture_enabled = True
        self.state_machine.status = "Model loaded! Pinch a piece to drag it"
        self.view = self.state_machine.view()
        logger.info("hand detector ready")
        return True

    def tick(self, image: Optional[np.ndarray], now: Optional[float] = None) -> GestureView:
        """
        Run one detect-and-decide cycle

        Args:
            image: BGR frame (ignored when gesture input is disabled)
            now: frame time (ms), defaults to the session clock
        """
        if now is None:
            now = self.clock()
        self._frame_count += 1

        if self.gesture_enabled and image is not None:
            hands = self._detect(image, now)
            self.last_hands = hands
            self.state_machine.tick(hands[0] if hands else None, now)

        result = self.opponent.tick(now)
        if result is not None:
            self.message = self.opponent.last_message

        self.view = self.state_machine.view()
        return self.view

    def _detect(self, image: np.ndarray, now: float) -> List[HandObservation]:
        try:
            return self.detector.detect(image, now)
        except Exception:
            logger.exception("hand detection failed on frame %d", self._frame_count)
            return []

    def _on_gesture_event(self, event: GestureEvent):
        if event.event_type in ("move", "move_rejected", "cancel"):
            self.message = event.message
        logger.debug("gesture event: %s", event.to_dict())

    async def run(
        self,
        frames: Iterable[Union[Frame, np.ndarray]],
        on_frame: Optional[FrameCallback] = None
    ):
        """
        Tick once per frame, yielding to the event loop between frames

        Stops when the frames run out, when stop() is called, or when
        `on_frame` returns False.
        """
        self._running = True
        logger.info("frame loop started")
        try:
            for frame in frames:
                if not self._running:
                    break
                image = frame.image if isinstance(frame, Frame) else frame
                view = self.tick(image)
                if on_frame is not None and on_frame(image, view) is False:
                    break
                await asyncio.sleep(0)
        finally:
            self._running = False
            logger.info("frame loop stopped after %d frames", self._frame_count)

    def start_processing(
        self,
        frames: Iterable[Union[Frame, np.ndarray]],
        on_frame: Optional[FrameCallback] = None
    ) -> asyncio.Task:
        """Run the frame loop as a background task (must be called inside a running loop)"""
        self._processing_task = asyncio.create_task(self.run(frames, on_frame))
        return self._processing_task

    async def stop(self):
        """Stop the frame loop and release the detector (once)"""
        self._running = False

        if self._processing_task is not None:
            self._processing_task.cancel()
            try:
                await self._processing_task
            except asyncio.CancelledError:
                pass
            self._processing_task = None

        if self.detector is not None and not self._detector_closed:
            self._detector_closed = True
            self.detector.close()

    def new_game(self):
        self.game.reset()
        self.state_machine.reset()
        self.opponent.reset()
        self.message = self._new_game_message()
        if self.init_error is not None:
            self.state_machine.status = f"Hand tracking unavailable: {self.init_error}"
        self.view = self.state_machine.view()
        logger.info("new game")

    @property
    def game_status(self) -> str:
        return self.game.status_text(self.message)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def frame_count(self) -> int:
        return self._frame_count
