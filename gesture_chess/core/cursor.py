"""
Cursor smoothing for display
"""

from typing import Optional, Tuple


class CursorSmoother:
    """Exponential smoothing of the board-relative cursor position"""

    def __init__(self, alpha: float = 0.8):
        if not (0.0 <= alpha < 1.0):
            raise ValueError(f"alpha must be in [0, 1), got {alpha}")
        self.alpha = alpha
        self._smoothed: Optional[Tuple[float, float]] = None

    @property
    def position(self) -> Optional[Tuple[float, float]]:
        return self._smoothed

    def update(self, raw: Tuple[float, float]) -> Tuple[float, float]:
        if self._smoothed is None:
            self._smoothed = (float(raw[0]), float(raw[1]))
            return self._smoothed

        a = self.alpha
        self._smoothed = (
            self._smoothed[0] * a + raw[0] * (1 - a),
            self._smoothed[1] * a + raw[1] * (1 - a),
        )
        return self._smoothed

    def reset(self):
        self._smoothed = None
