"""
Minimum-Interval Rate Limiting

Keeps a fixed minimum spacing between successive requests of one session,
to avoid overloading the target site.
"""

import time
import logging
from typing import Callable, Dict
from threading import Lock

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Blocks until at least `least_interval_millis` has passed since the
    last request completed.
    """

    def __init__(
        self,
        least_interval_millis: int = 5000,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.least_interval = least_interval_millis / 1000.0
        self._clock = clock
        self._sleep = sleep
        # First request is never throttled
        self.last_request_time = clock() - self.least_interval
        self._lock = Lock()

    def wait(self) -> float:
        """
        Wait until the interval has elapsed.
        Returns actual wait time in seconds.
        """
        with self._lock:
            elapsed = self._clock() - self.last_request_time
            wait_time = max(0.0, self.least_interval - elapsed)

            if wait_time > 0:
                logger.debug(f"Rate limiting: sleeping {wait_time:.2f}s")
                self._sleep(wait_time)

            return wait_time

    def mark(self):
        """Call right after a request completes, whether it succeeded or not"""
        with self._lock:
            self.last_request_time = self._clock()

    @property
    def status(self) -> Dict:
        """Current rate limiter status"""
        return {
            'least_interval': self.least_interval,
            'last_request_time': self.last_request_time,
            'seconds_until_ready': max(
                0.0, self.least_interval - (self._clock() - self.last_request_time)
            ),
        }
