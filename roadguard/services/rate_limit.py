"""
Sliding-window rate limiter for outgoing translation requests.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable


class RateLimiter:
    """
    Allow at most ``max_requests`` acquisitions per ``window`` seconds.

    Waiters poll rather than queue, so there is no fairness between them.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window: float = 1.0,
        poll_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window = window
        self.poll_interval = poll_interval
        self._clock = clock
        self._requests: list[float] = []

    def try_acquire(self) -> bool:
        """Record a request if the window has room."""
        now = self._clock()
        self._requests = [t for t in self._requests if now - t < self.window]

        if len(self._requests) >= self.max_requests:
            return False

        self._requests.append(now)
        return True

    async def acquire(self) -> None:
        """Wait until a request slot is available."""
        while not self.try_acquire():
            await asyncio.sleep(self.poll_interval)

    @property
    def in_window(self) -> int:
        now = self._clock()
        return sum(1 for t in self._requests if now - t < self.window)
