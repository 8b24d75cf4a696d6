"""stream_throttler package: app/core/config.

Expose the throttler and library-friendly client at the package level.
"""

from .app.api import StreamThrottlerClient, ThrottlerSettings
from .core.domain.errors import InvalidThrottleRateError, StreamThrottlerError, ThrottleInterruptedError
from .core.domain.models import UNLIMITED, ThrottleParameters
from .core.services.throttled_iter import throttled
from .core.services.throttled_producer import ThrottledProducer
from .core.throttler import Throttler

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "StreamThrottlerClient",
    "ThrottlerSettings",
    "Throttler",
    "ThrottledProducer",
    "ThrottleParameters",
    "throttled",
    "UNLIMITED",
    "StreamThrottlerError",
    "InvalidThrottleRateError",
    "ThrottleInterruptedError",
]
