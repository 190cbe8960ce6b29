"""
Pinch detection
Thumb-tip / index-tip proximity with a debounce window on the exposed value
"""

import logging
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


def pinch_distance(thumb: Sequence[float], index: Sequence[float], use_depth: bool = True) -> float:
    """Euclidean distance between two landmarks, optionally ignoring z"""
    a = np.asarray(thumb, dtype=float)
    b = np.asarray(index, dtype=float)
    if not use_depth:
        a = a[:2]
        b = b[:2]
    return float(np.linalg.norm(a - b))


class PinchDetector:
    """
    Binary pinch gesture with a cooldown

    The raw value is `distance < threshold`. The exposed value follows the
    raw value, but once it has changed it holds for at least `cooldown_ms`
    before it may change again.
    """

    def __init__(
        self,
        threshold: float = 0.06,
        cooldown_ms: float = 100,
        use_depth: bool = True
    ):
        self.threshold = threshold
        self.cooldown_ms = cooldown_ms
        self.use_depth = use_depth

        self._pinching = False
        self._last_change_ms: Optional[float] = None
        self.last_distance: Optional[float] = None

    @property
    def is_pinching(self) -> bool:
        return self._pinching

    def update(self, thumb: Sequence[float], index: Sequence[float], now: float) -> bool:
        """
        Feed one frame of landmarks

        Args:
            thumb: thumb tip (x, y, z)
            index: index fingertip (x, y, z)
            now: frame timestamp (ms)

        Returns:
            The debounced pinch value
        """
        distance = pinch_distance(thumb, index, self.use_depth)
        self.last_distance = distance
        return self.update_raw(distance < self.threshold, now)

    def update_raw(self, raw: bool, now: float) -> bool:
        """Feed an already classified pinch boolean"""
        if raw == self._pinching:
            return self._pinching

        if self._last_change_ms is not None and now - self._last_change_ms < self.cooldown_ms:
            logger.debug("pinch flip suppressed (%.0fms since last change)", now - self._last_change_ms)
            return self._pinching

        self._pinching = raw
        self._last_change_ms = now
        return self._pinching

    def reset(self):
        self._pinching = False
        self._last_change_ms = None
        self.last_distance = None
