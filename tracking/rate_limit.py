import time
from typing import Callable, Optional


class RecalculationCooldown:
    """Skips re-entry of a full recalculation within a short window"""

    def __init__(self, window_seconds: float = 2.0, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self.clock = clock
        self._last_run: Optional[float] = None

    def try_acquire(self) -> bool:
        """Return True and start a new window when the last run is old enough"""
        now = self.clock()
        if self._last_run is not None and now - self._last_run < self.window_seconds:
            return False
        self._last_run = now
        return True

    def reset(self):
        self._last_run = None
