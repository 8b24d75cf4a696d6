from __future__ import annotations

from threading import Event
from typing import Protocol
import time

from ..domain.errors import ThrottleInterruptedError


class ClockPort(Protocol):
    def monotonic_ns(self) -> int:
        """Return a monotonic timestamp in nanoseconds."""
        ...

    def sleep(self, seconds: float) -> None:
        """Sleep for the given seconds. Raises ThrottleInterruptedError if interrupted."""

    def interrupt(self) -> None:
        """Cancel the current sleep, or the next one if none is in progress."""


class SystemClock:
    """Monotonic clock whose sleeps can be cancelled from another thread.

    An interrupt raised while nobody sleeps stays pending and is consumed by the
    next call to sleep(), which raises immediately.
    """

    def __init__(self) -> None:
        self._interrupted = Event()

    def monotonic_ns(self) -> int:
        return time.monotonic_ns()

    def sleep(self, seconds: float) -> None:
        if self._interrupted.wait(seconds):
            self._interrupted.clear()
            raise ThrottleInterruptedError("throttle sleep interrupted")

    def interrupt(self) -> None:
        self._interrupted.set()
