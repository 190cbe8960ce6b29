"""
Gesture Chess configuration
Pinch thresholds, tracking timeouts, cursor smoothing, board and camera settings
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PinchConfig:
    """Pinch detection settings"""

    # Thumb tip to index tip distance in normalized landmark units
    threshold: float = 0.06
    # Minimum time between two changes of the exposed pinch value (ms)
    cooldown_ms: float = 100
    # Include the z axis in the distance (stricter against hand tilt)
    use_depth: bool = True


@dataclass
class TrackingConfig:
    """Hand tracking and grab timing"""

    lost_timeout_ms: float = 1500    # no hand for this long cancels the drag
    grab_cooldown_ms: float = 300    # minimum spacing between grab attempts


@dataclass
class CursorConfig:
    """Cursor display settings"""

    smoothing_alpha: float = 0.8     # weight of the previous smoothed position
    style: str = "arrow"             # "arrow" | "dot"


@dataclass
class BoardConfig:
    """Rendered board settings"""

    size_px: int = 640
    human_color: str = "white"       # "white" | "black"


@dataclass
class OpponentConfig:
    """Random opponent settings"""

    think_delay_ms: float = 800
    seed: Optional[int] = None


@dataclass
class DetectorConfig:
    """MediaPipe HandLandmarker settings"""

    model_path: str = "models/hand_landmarker.task"
    model_url: str = (
        "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
        "hand_landmarker/float16/1/hand_landmarker.task"
    )
    num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass
class CameraConfig:
    """Camera settings"""

    device_id: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30


@dataclass
class Config:
    """Top-level configuration"""

    pinch: PinchConfig = field(default_factory=PinchConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    cursor: CursorConfig = field(default_factory=CursorConfig)
    board: BoardConfig = field(default_factory=BoardConfig)
    opponent: OpponentConfig = field(default_factory=OpponentConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)

    log_level: str = "INFO"


default_config = Config()
