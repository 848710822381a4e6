# bookshelf/utils/rate_limit.py

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, Optional, Tuple

@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry schedule for throttled requests.

    Each entry of `delays` is one retry; the number of retries is
    len(delays), so the schedule is plain data rather than recursion depth.
    """
    delays: Tuple[float, ...] = (5.0, 10.0, 20.0)

    @classmethod
    def exponential(cls, base_delay: float, retries: int = 3) -> "RetryPolicy":
        return cls(delays=tuple(base_delay * (2 ** attempt) for attempt in range(retries)))

    @property
    def max_retries(self) -> int:
        return len(self.delays)

    def __iter__(self) -> Iterator[float]:
        return iter(self.delays)

class RateLimiter:
    def __init__(self,
                 min_delay: float = 1.0,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize rate limiter with a fixed delay between requests.

        Args:
            min_delay: Minimum delay between requests in seconds
            sleep: Function used to wait; replaced in tests
        """
        self.min_delay = min_delay
        self.sleep = sleep
        self.request_count = 0
        self.last_request_time: Optional[datetime] = None

    def delay(self) -> None:
        """Apply appropriate delay before next request"""
        current_time = datetime.now()

        if self.last_request_time and self.min_delay > 0:
            time_since_last = (current_time - self.last_request_time).total_seconds()
            if time_since_last < self.min_delay:
                self.sleep(self.min_delay - time_since_last)

        self.request_count += 1
        self.last_request_time = datetime.now()

    def backoff(self, seconds: float) -> None:
        """Wait out a throttling response"""
        if seconds > 0:
            self.sleep(seconds)
        self.last_request_time = datetime.now()
