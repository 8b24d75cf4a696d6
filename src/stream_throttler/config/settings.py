from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.domain.models import UNLIMITED


class ThrottlerSettings(BaseSettings):
    """Throttler configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the STREAM_THROTTLER_ prefix.
    For example:
        - STREAM_THROTTLER_MAX_RECORDS_PER_SECOND=5000
        - STREAM_THROTTLER_LOG_LEVEL=INFO

    Alternatively, settings can be provided programmatically when creating the Container:
        container = Container()
        container.config.from_pydantic(ThrottlerSettings(max_records_per_second=5000))
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAM_THROTTLER_",
        case_sensitive=False,
        extra="forbid",
    )

    max_records_per_second: int = Field(
        default=UNLIMITED,
        description="Maximum records per second; -1 disables throttling",
    )

    log_level: Optional[str] = Field(
        default=None,
        description="Package log level (e.g., INFO, DEBUG). If None, logging is left unconfigured",
    )

    @field_validator("max_records_per_second")
    @classmethod
    def _check_rate(cls, value: int) -> int:
        if value != UNLIMITED and value <= 0:
            raise ValueError("max_records_per_second must be positive or -1 (unlimited)")
        return value
