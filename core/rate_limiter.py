import time
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimitWindow:
    count: int
    reset_time: float


class RateLimiter:
    """Fixed-window admission control per named resource (e.g. 'llm-api')"""

    def __init__(self, max_requests: int = 50, time_window: float = 60.0,
                 clock: Optional[Callable[[], float]] = None):
        self.max_requests = max_requests
        self.time_window = time_window
        self.clock = clock or time.monotonic
        self.windows: Dict[str, RateLimitWindow] = {}

    def check_rate_limit(self, key: str) -> bool:
        """Return True if a request against `key` is admitted right now"""
        now = self.clock()
        window = self.windows.get(key)

        if window is None or now > window.reset_time:
            self.windows[key] = RateLimitWindow(count=1, reset_time=now + self.time_window)
            return True

        if window.count >= self.max_requests:
            logger.warning(f"Rate limit reached for {key}: {window.count}/{self.max_requests}")
            return False

        window.count += 1
        return True
