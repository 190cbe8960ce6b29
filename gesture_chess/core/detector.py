"""
Hand detection
Wraps the MediaPipe Tasks HandLandmarker behind a detect(frame, timestamp) interface
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .model_assets import ensure_hand_landmarker_task

logger = logging.getLogger(__name__)


class LandmarkIndex(IntEnum):
    """MediaPipe hand landmark indices used here"""
    WRIST = 0
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_TIP = 8
    MIDDLE_TIP = 12
    RING_TIP = 16
    PINKY_TIP = 20


FINGERTIPS = (
    LandmarkIndex.THUMB_TIP,
    LandmarkIndex.INDEX_TIP,
    LandmarkIndex.MIDDLE_TIP,
    LandmarkIndex.RING_TIP,
    LandmarkIndex.PINKY_TIP,
)

# Skeleton connections (for drawing)
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),        # thumb
    (0, 5), (5, 6), (6, 7), (7, 8),        # index
    (0, 9), (9, 10), (10, 11), (11, 12),   # middle
    (0, 13), (13, 14), (14, 15), (15, 16), # ring
    (0, 17), (17, 18), (18, 19), (19, 20), # pinky
    (5, 9), (9, 13), (13, 17)              # palm
]


@dataclass
class HandObservation:
    """One detected hand for one frame"""
    landmarks: np.ndarray                  # 21x3 normalized (x, y, z)
    handedness: Optional[str] = None       # "Left" / "Right"
    confidence: float = 0.0

    @property
    def thumb_tip(self) -> np.ndarray:
        return self.landmarks[LandmarkIndex.THUMB_TIP]

    @property
    def index_tip(self) -> np.ndarray:
        return self.landmarks[LandmarkIndex.INDEX_TIP]

    def to_dict(self):
        return {
            "handedness": self.handedness,
            "confidence": self.confidence,
            "landmarks": self.landmarks.tolist()
        }


class HandDetector:
    """
    Hand landmark detector (MediaPipe Tasks, VIDEO running mode)

    Construction loads the model and may download it, so it can take a
    while; the session builds it off the event loop.
    """

    def __init__(
        self,
        model_path: str,
        model_url: str,
        num_hands: int = 2,
        min_detection_confidence: float = 0.5,
        min_presence_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5
    ):
        import mediapipe as mp
        from mediapipe.tasks.python import BaseOptions
        from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode

        self._mp = mp
        model_path = ensure_hand_landmarker_task(model_path, model_url)

        options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=model_path),
            running_mode=RunningMode.VIDEO,
            num_hands=num_hands,
            min_hand_detection_confidence=min_detection_confidence,
            min_hand_presence_confidence=min_presence_confidence,
            min_tracking_confidence=min_tracking_confidence
        )
        self._landmarker = HandLandmarker.create_from_options(options)
        self._last_timestamp_ms = -1
        self._closed = False
        logger.info("hand landmarker ready (%s)", model_path)

    def detect(self, image: np.ndarray, timestamp_ms: float) -> List[HandObservation]:
        """
        Detect hands in a BGR frame

        Args:
            image: BGR image (OpenCV order)
            timestamp_ms: frame time; VIDEO mode needs strictly increasing values

        Returns:
            List of HandObservation, possibly empty
        """
        if self._closed:
            raise RuntimeError("detector is closed")

        ts = int(timestamp_ms)
        if ts <= self._last_timestamp_ms:
            ts = self._last_timestamp_ms + 1
        self._last_timestamp_ms = ts

        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=image_rgb)
        result = self._landmarker.detect_for_video(mp_image, ts)

        hands = []
        handedness_list = result.handedness or []
        for i, hand_landmarks in enumerate(result.hand_landmarks or []):
            label = None
            score = 0.0
            if i < len(handedness_list) and handedness_list[i]:
                label = handedness_list[i][0].category_name
                score = float(handedness_list[i][0].score)

            landmarks = np.array([[lm.x, lm.y, lm.z] for lm in hand_landmarks], dtype=float)
            hands.append(HandObservation(landmarks=landmarks, handedness=label, confidence=score))

        return hands

    def draw_landmarks(
        self,
        image: np.ndarray,
        hands: List[HandObservation],
        color: Tuple[int, int, int] = (59, 235, 255),  # yellow (BGR)
        thickness: int = 2,
        circle_radius: int = 4
    ) -> np.ndarray:
        """Draw hand skeletons onto a copy of `image`"""
        output = image.copy()
        h, w = output.shape[:2]

        for hand in hands:
            points = [(int(x * w), int(y * h)) for x, y, _ in hand.landmarks]

            for start_idx, end_idx in HAND_CONNECTIONS:
                cv2.line(output, points[start_idx], points[end_idx], color, thickness)

            for i, point in enumerate(points):
                if i in FINGERTIPS:
                    cv2.circle(output, point, circle_radius + 2, (0, 255, 0), -1)
                else:
                    cv2.circle(output, point, circle_radius, color, -1)

        return output

    def close(self):
        """Release the landmarker; safe to call more than once"""
        if self._closed:
            return
        self._closed = True
        self._landmarker.close()
        logger.info("hand landmarker closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
