from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


UNLIMITED = -1  # max_records_per_second sentinel: never throttle
NO_BATCHING = -1  # throttle_batch_size while UNLIMITED
HIGH_RATE_THRESHOLD = 10_000  # records/sec at which fixed 2ms batches take over


class Regime(Enum):
    UNLIMITED = "unlimited"
    HIGH_RATE = "high-rate"
    LOW_RATE = "low-rate"

    @classmethod
    def for_rate(cls, max_records_per_second: int) -> "Regime":
        if max_records_per_second == UNLIMITED:
            return cls.UNLIMITED
        if max_records_per_second >= HIGH_RATE_THRESHOLD:
            return cls.HIGH_RATE
        return cls.LOW_RATE


@dataclass(frozen=True)
class ThrottleParameters:
    """Consistent view of a throttler's batching state, taken under its lock."""

    max_records_per_second: int
    throttle_batch_size: int
    nanos_per_batch: int
    end_of_next_batch_nanos: int
    current_batch: int = 0

    @property
    def regime(self) -> Regime:
        return Regime.for_rate(self.max_records_per_second)
