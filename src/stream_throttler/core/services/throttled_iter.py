from __future__ import annotations

from typing import Iterable, Iterator, TypeVar

from ..ports.throttle_port import ThrottlePort

T = TypeVar("T")


def throttled(iterable: Iterable[T], throttler: ThrottlePort) -> Iterator[T]:
    """Yield items from iterable no faster than the throttler allows.

    throttle() runs after the consumer has handled each item, so the time spent
    downstream counts against the batch.

    Example:
        >>> for row in throttled(stream_csv(path), Throttler(1000)):
        ...     producer.produce(topic, row)
    """
    for item in iterable:
        yield item
        throttler.throttle()
