from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from .domain.errors import InvalidThrottleRateError
from .domain.models import HIGH_RATE_THRESHOLD, NO_BATCHING, UNLIMITED, ThrottleParameters
from .ports.clock_port import ClockPort, SystemClock

logger = logging.getLogger(__name__)

ONE_SECOND_NANOS = 1_000_000_000
NANOS_PER_MILLI = 1_000_000
HIGH_RATE_NANOS_PER_BATCH = 2_000_000


def validate_rate(max_records_per_second: object) -> int:
    """Return the rate unchanged if it is UNLIMITED or a positive int, else raise."""
    if isinstance(max_records_per_second, bool) or not isinstance(max_records_per_second, int):
        raise InvalidThrottleRateError(max_records_per_second)
    if max_records_per_second != UNLIMITED and max_records_per_second <= 0:
        raise InvalidThrottleRateError(max_records_per_second)
    return max_records_per_second


def batching_for_rate(max_records_per_second: int) -> tuple[int, int]:
    """Derive (throttle_batch_size, nanos_per_batch) for a validated rate.

    High rates throttle in fixed 2ms windows; low rates check the clock every
    ~1/20th of a second's worth of records, and always at least every record.
    """
    rate = validate_rate(max_records_per_second)
    if rate == UNLIMITED:
        return NO_BATCHING, 0
    if rate >= HIGH_RATE_THRESHOLD:
        return rate // 500, HIGH_RATE_NANOS_PER_BATCH
    batch_size = rate // 20 + 1
    return batch_size, (ONE_SECOND_NANOS // rate) * batch_size


def _truncated_millis(nanos: int) -> int:
    # int division toward zero, so a late deadline never rounds up to 1ms of sleep
    if nanos >= 0:
        return nanos // NANOS_PER_MILLI
    return -(-nanos // NANOS_PER_MILLI)


class Throttler:
    """Throttle a loop to a given number of executions (records) per second.

    The clock is only read once per batch; calls in between just count. When a
    batch completes ahead of its deadline the calling thread sleeps for the
    remaining whole milliseconds. When it completes late, the deadline window is
    restarted from now and the lost time is not made up.

    Example:
        throttler = Throttler(1000)
        for record in source:
            emit(record)
            throttler.throttle()

        # From a control thread:
        throttler.adjust_max_records_per_second(5000)
    """

    def __init__(self, max_records_per_second: int, *, clock: Optional[ClockPort] = None) -> None:
        self._clock: ClockPort = clock or SystemClock()
        # _lock guards every field below; _gate serializes whole throttle() calls
        self._lock = Lock()
        self._gate = Lock()
        self._max_records_per_second = UNLIMITED
        self._throttle_batch_size = NO_BATCHING
        self._nanos_per_batch = 0
        self._end_of_next_batch_nanos = 0
        self._current_batch = 0
        self._records_processed_this_second = 0
        self._last_log_time_nanos = 0
        self._setup(max_records_per_second)

    def adjust_max_records_per_second(self, max_records_per_second: int) -> None:
        """Replace the rate. Takes effect at the next checkpoint.

        Raises:
            InvalidThrottleRateError: if the rate is not -1 and not positive.
        """
        self._setup(max_records_per_second)

    configure = adjust_max_records_per_second

    def _setup(self, max_records_per_second: int) -> None:
        batch_size, nanos_per_batch = batching_for_rate(max_records_per_second)
        with self._lock:
            self._max_records_per_second = max_records_per_second
            self._throttle_batch_size = batch_size
            self._nanos_per_batch = nanos_per_batch
            self._end_of_next_batch_nanos = self._clock.monotonic_ns() + nanos_per_batch
            self._current_batch = 0
            if max_records_per_second != UNLIMITED:
                self._last_log_time_nanos = self._end_of_next_batch_nanos
        logger.debug(
            f"Throttler configured: max_records_per_second={max_records_per_second}, "
            f"batch_size={batch_size}, nanos_per_batch={nanos_per_batch}"
        )

    def throttle(self) -> None:
        """Count one record; at a batch checkpoint, sleep if ahead of schedule.

        Raises:
            ThrottleInterruptedError: if the sleep was interrupted via interrupt().
        """
        with self._gate:
            with self._lock:
                if self._throttle_batch_size == NO_BATCHING:
                    return
                self._current_batch += 1
                if self._current_batch < self._throttle_batch_size:
                    return

                self._records_processed_this_second += self._current_batch
                self._current_batch = 0

                now = self._clock.monotonic_ns()
                millis_remaining = _truncated_millis(self._end_of_next_batch_nanos - now)

                if now - self._last_log_time_nanos >= ONE_SECOND_NANOS:
                    logger.info(
                        f"Records processed this second: {self._records_processed_this_second}, "
                        f"throttle batch size: {self._throttle_batch_size}"
                    )
                    self._records_processed_this_second = 0
                    self._last_log_time_nanos = now

                if millis_remaining <= 0:
                    # Behind schedule: restart the window instead of bursting to catch up
                    self._end_of_next_batch_nanos = now + self._nanos_per_batch
                    return
                self._end_of_next_batch_nanos += self._nanos_per_batch

            self._clock.sleep(millis_remaining / 1000)

    def interrupt(self) -> None:
        """Cancel the current sleep (or the next one if no thread is sleeping)."""
        self._clock.interrupt()

    def snapshot(self) -> ThrottleParameters:
        with self._lock:
            return ThrottleParameters(
                max_records_per_second=self._max_records_per_second,
                throttle_batch_size=self._throttle_batch_size,
                nanos_per_batch=self._nanos_per_batch,
                end_of_next_batch_nanos=self._end_of_next_batch_nanos,
                current_batch=self._current_batch,
            )

    @property
    def max_records_per_second(self) -> int:
        with self._lock:
            return self._max_records_per_second

    @property
    def throttle_batch_size(self) -> int:
        with self._lock:
            return self._throttle_batch_size

    @property
    def nanos_per_batch(self) -> int:
        with self._lock:
            return self._nanos_per_batch
