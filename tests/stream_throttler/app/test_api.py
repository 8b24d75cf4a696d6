from __future__ import annotations

import os
import subprocess
import sys

import pytest
from pydantic import ValidationError

from stream_throttler import StreamThrottlerClient, Throttler
from stream_throttler.app.container import Container
from stream_throttler.core.domain.errors import InvalidThrottleRateError
from stream_throttler.core.domain.models import Regime


@pytest.fixture
def client():
    """Create a client instance for testing."""
    with StreamThrottlerClient() as c:
        yield c


def test_default_rate_is_unlimited(client):
    assert client.max_records_per_second == -1
    assert client.throttler().throttle_batch_size == -1


def test_rate_override_applies_to_new_throttlers():
    with StreamThrottlerClient(max_records_per_second=500) as c:
        t = c.throttler()
        assert isinstance(t, Throttler)
        assert t.max_records_per_second == 500
        assert c.throttler(20000).throttle_batch_size == 40


def test_invalid_client_rate_raises():
    with pytest.raises(ValidationError):
        StreamThrottlerClient(max_records_per_second=0)


def test_throttlers_are_independent(client):
    a = client.throttler(1000)
    b = client.throttler(1000)
    assert a is not b
    a.throttle()
    assert a.snapshot().current_batch == 1
    assert b.snapshot().current_batch == 0


def test_parameters_without_throttler():
    p = StreamThrottlerClient.parameters(9999)
    assert p.regime is Regime.LOW_RATE
    assert (p.throttle_batch_size, p.nanos_per_batch) == (500, 50_005_000)
    with pytest.raises(InvalidThrottleRateError):
        StreamThrottlerClient.parameters(-3)


def test_throttled_and_producer_unlimited(client):
    assert list(client.throttled(range(5))) == [0, 1, 2, 3, 4]

    out: list[int] = []
    producer = client.producer(range(5), out.append)
    assert producer.run() == 5
    assert out == [0, 1, 2, 3, 4]


def test_client_reads_environment_when_created(monkeypatch):
    monkeypatch.setenv("STREAM_THROTTLER_MAX_RECORDS_PER_SECOND", "250")
    with StreamThrottlerClient() as c:
        assert c.max_records_per_second == 250
        assert c.throttler().throttle_batch_size == 13


def test_invalid_environment_only_fails_the_client(monkeypatch):
    monkeypatch.setenv("STREAM_THROTTLER_MAX_RECORDS_PER_SECOND", "0")
    assert Container().throttler().max_records_per_second == -1
    with pytest.raises(ValidationError):
        StreamThrottlerClient()


def test_import_does_not_depend_on_environment():
    env = {**os.environ, "STREAM_THROTTLER_MAX_RECORDS_PER_SECOND": "0"}
    cp = subprocess.run(
        [sys.executable, "-c", "from stream_throttler import Throttler; Throttler(5)"],
        capture_output=True,
        text=True,
        env=env,
    )
    assert cp.returncode == 0, cp.stderr
