"""tests/conftest.py

Common fixtures for the entire test suite.
"""

import logging

import pytest
from typer.testing import CliRunner

from stream_throttler.core.domain.errors import ThrottleInterruptedError


class FakeClock:
    """Deterministic ClockPort: time only moves on sleep() or advance().

    Counts monotonic_ns() reads and records every requested sleep.
    """

    def __init__(self, start_ns: int = 1_000_000_000_000) -> None:
        self.now_ns = start_ns
        self.reads = 0
        self.sleeps: list[float] = []
        self._interrupted = False

    def monotonic_ns(self) -> int:
        self.reads += 1
        return self.now_ns

    def sleep(self, seconds: float) -> None:
        if self._interrupted:
            self._interrupted = False
            raise ThrottleInterruptedError("fake sleep interrupted")
        self.sleeps.append(seconds)
        self.now_ns += round(seconds * 1_000_000_000)

    def interrupt(self) -> None:
        self._interrupted = True

    def advance(self, nanos: int) -> None:
        self.now_ns += nanos


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep STREAM_THROTTLER_* settings from the developer's shell out of tests."""
    monkeypatch.delenv("STREAM_THROTTLER_MAX_RECORDS_PER_SECOND", raising=False)
    monkeypatch.delenv("STREAM_THROTTLER_LOG_LEVEL", raising=False)


@pytest.fixture(autouse=True)
def restore_package_logger():
    """The CLI may attach handlers and disable propagation; undo that after each test."""
    logger = logging.getLogger("stream_throttler")
    handlers = list(logger.handlers)
    propagate = logger.propagate
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.propagate = propagate
    logger.setLevel(level)
