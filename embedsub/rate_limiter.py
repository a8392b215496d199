"""Spacing between consecutive requests to the translation service."""

import time
from abc import ABC, abstractmethod
from typing import Callable


class RateLimiter(ABC):
    """Blocks the caller until the next request may be sent."""

    @abstractmethod
    def wait(self) -> None:
        pass


class FixedDelayRateLimiter(RateLimiter):
    """
    Sleeps ``delay_seconds`` before every request except the first.

    Requests are sequential, so the sleep always falls between the end of
    one request and the start of the next, however long the request took.
    """

    def __init__(self, delay_seconds: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds cannot be negative, got {delay_seconds}")
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._has_requested = False

    def wait(self) -> None:
        if self._has_requested and self.delay_seconds > 0:
            self._sleep(self.delay_seconds)
        self._has_requested = True


class NoDelayRateLimiter(RateLimiter):
    """Never waits. Used in tests and when the delay is configured as zero."""

    def wait(self) -> None:
        return None
