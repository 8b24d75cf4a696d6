from __future__ import annotations

from typing import Protocol


class ThrottlePort(Protocol):
    def throttle(self) -> None:
        """Gate one unit of work, blocking at batch checkpoints when ahead of the rate."""

    def adjust_max_records_per_second(self, max_records_per_second: int) -> None:
        """Replace the configured rate and all derived batching parameters."""

    def interrupt(self) -> None:
        """Cancel a sleep in progress; the sleeping throttle() raises ThrottleInterruptedError."""
