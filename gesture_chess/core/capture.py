"""
Camera capture
Reads frames from the webcam on demand, one per tick of the frame loop
"""

import logging
import time
from dataclasses import dataclass
from typing import Generator, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class Frame:
    """One video frame"""
    image: np.ndarray           # BGR image
    frame_id: int               # sequence number
    timestamp: float            # ms since capture start
    width: int
    height: int


class CameraCapture:
    """
    Webcam reader

    Frames are read synchronously by the caller; there is no capture thread.
    """

    def __init__(
        self,
        device_id: int = 0,
        width: int = 640,
        height: int = 480,
        fps: int = 30
    ):
        """
        Args:
            device_id: camera device index
            width: requested capture width
            height: requested capture height
            fps: requested frame rate
        """
        self.device_id = device_id
        self.width = width
        self.height = height
        self.fps = fps

        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_count = 0
        self._start_time = 0.0

    def start(self) -> bool:
        """
        Open the camera

        Returns:
            True when the camera is open
        """
        if self._cap is not None:
            return True

        cap = cv2.VideoCapture(self.device_id)
        if not cap.isOpened():
            logger.error("could not open camera %d", self.device_id)
            cap.release()
            return False

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.fps)

        logger.info(
            "camera started: %dx%d @ %.1ffps",
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            cap.get(cv2.CAP_PROP_FPS)
        )

        self._cap = cap
        self._frame_count = 0
        self._start_time = time.monotonic() * 1000
        return True

    def stop(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("camera stopped")

    def read(self) -> Optional[Frame]:
        """Read the next frame, or None if the camera returned nothing"""
        if self._cap is None:
            return None

        ret, image = self._cap.read()
        if not ret:
            logger.warning("failed to read frame")
            return None

        self._frame_count += 1
        return Frame(
            image=image,
            frame_id=self._frame_count,
            timestamp=time.monotonic() * 1000 - self._start_time,
            width=image.shape[1],
            height=image.shape[0]
        )

    def read_generator(self) -> Generator[Frame, None, None]:
        """Yield frames until the camera is stopped"""
        while self._cap is not None:
            frame = self.read()
            if frame is not None:
                yield frame
