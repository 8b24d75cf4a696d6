from __future__ import annotations

from dependency_injector import containers, providers

from ..core.domain.models import UNLIMITED
from ..core.ports.clock_port import SystemClock
from ..core.services.throttled_producer import ThrottledProducer
from ..core.throttler import Throttler


class Container(containers.DeclarativeContainer):
	# Loaded from ThrottlerSettings by StreamThrottlerClient, not at import time
	config = providers.Configuration(default={"max_records_per_second": UNLIMITED})

	# One clock per throttler: interrupt() must only wake its own sleeper
	clock = providers.Factory(SystemClock)

	throttler = providers.Factory(
		Throttler,
		max_records_per_second=config.max_records_per_second.as_int(),
		clock=clock,
	)

	throttled_producer = providers.Factory(ThrottledProducer, throttler=throttler)
