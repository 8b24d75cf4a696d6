from __future__ import annotations

import pytest
from pydantic import ValidationError

from stream_throttler.config.settings import ThrottlerSettings


def test_defaults_to_unlimited():
    s = ThrottlerSettings()
    assert s.max_records_per_second == -1
    assert s.log_level is None


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("STREAM_THROTTLER_MAX_RECORDS_PER_SECOND", "250")
    monkeypatch.setenv("STREAM_THROTTLER_LOG_LEVEL", "DEBUG")
    s = ThrottlerSettings()
    assert s.max_records_per_second == 250
    assert s.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["0", "-5"])
def test_rejects_invalid_rate_from_environment(monkeypatch, value):
    monkeypatch.setenv("STREAM_THROTTLER_MAX_RECORDS_PER_SECOND", value)
    with pytest.raises(ValidationError):
        ThrottlerSettings()


def test_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        ThrottlerSettings(batch_size=10)
