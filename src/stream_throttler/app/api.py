from __future__ import annotations

from typing import Callable, Iterable, Iterator, TypeVar

from .container import Container
from ..config.settings import ThrottlerSettings
from ..core.domain.models import ThrottleParameters
from ..core.services.throttled_iter import throttled
from ..core.services.throttled_producer import ThrottledProducer
from ..core.throttler import Throttler, batching_for_rate

T = TypeVar("T")


class StreamThrottlerClient:
    """Client for building throttlers and throttled record streams.

    The container is created once and reused; every throttler() call returns a
    fresh Throttler with its own clock, so instances never share state.

    Example:
        # Using default configuration (from environment variables)
        with StreamThrottlerClient() as client:
            for record in client.throttled(records):
                send(record)

        # Explicit rate
        with StreamThrottlerClient(max_records_per_second=500) as client:
            producer = client.producer(records, send)
            producer.start()
            producer.adjust_max_records_per_second(2000)
            producer.cancel()
    """

    def __init__(self, *, max_records_per_second: int | None = None):
        """Initialize the client.

        Args:
            max_records_per_second: Optional default rate for throttlers built by this client.
                                    If None, uses STREAM_THROTTLER_MAX_RECORDS_PER_SECOND or -1 (unlimited).

        Raises:
            pydantic.ValidationError: If the rate is neither -1 nor positive.
        """
        self._container = Container()

        # Environment is read here so that importing the package never depends on it
        overrides = {}
        if max_records_per_second is not None:
            overrides["max_records_per_second"] = max_records_per_second
        self._container.config.from_pydantic(ThrottlerSettings(**overrides))

        self._container.init_resources()

    @property
    def max_records_per_second(self) -> int:
        return int(self._container.config.max_records_per_second())

    def throttler(self, max_records_per_second: int | None = None) -> Throttler:
        """Return a new Throttler at the given rate, or the configured default."""
        if max_records_per_second is None:
            return self._container.throttler()
        return self._container.throttler(max_records_per_second=max_records_per_second)

    def throttled(self, iterable: Iterable[T], max_records_per_second: int | None = None) -> Iterator[T]:
        """Wrap iterable so that it yields no faster than the rate."""
        return throttled(iterable, self.throttler(max_records_per_second))

    def producer(
        self,
        source: Iterable[T],
        sink: Callable[[T], None],
        max_records_per_second: int | None = None,
    ) -> ThrottledProducer[T]:
        """Return a ThrottledProducer pushing source into sink at the rate."""
        return self._container.throttled_producer(
            source=source,
            sink=sink,
            throttler=self.throttler(max_records_per_second),
        )

    @staticmethod
    def parameters(max_records_per_second: int) -> ThrottleParameters:
        """Return the batching parameters a rate maps to, without creating a throttler.

        Raises:
            InvalidThrottleRateError: If the rate is neither -1 nor positive.
        """
        batch_size, nanos_per_batch = batching_for_rate(max_records_per_second)
        return ThrottleParameters(
            max_records_per_second=max_records_per_second,
            throttle_batch_size=batch_size,
            nanos_per_batch=nanos_per_batch,
            end_of_next_batch_nanos=0,
        )

    def close(self) -> None:
        """Release container resources."""
        self._container.shutdown_resources()

    def __enter__(self) -> StreamThrottlerClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "StreamThrottlerClient",
    "ThrottlerSettings",
]
