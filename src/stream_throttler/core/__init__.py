"""Core throttling logic: the throttler, its ports, and the loops built on it."""

from .services.throttled_iter import throttled
from .services.throttled_producer import ThrottledProducer
from .throttler import Throttler

__all__ = ["Throttler", "ThrottledProducer", "throttled"]
