from __future__ import annotations


class StreamThrottlerError(Exception):
    """Base exception for throttler errors."""


class InvalidThrottleRateError(StreamThrottlerError, ValueError):
    """Rate is neither UNLIMITED (-1) nor a positive integer."""

    def __init__(self, rate: object) -> None:
        super().__init__(f"max_records_per_second must be positive or -1 (unlimited), got {rate!r}")
        self.rate = rate


class ThrottleInterruptedError(StreamThrottlerError):
    """A throttle sleep was cancelled before it completed."""
