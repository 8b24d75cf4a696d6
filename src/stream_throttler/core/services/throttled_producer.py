from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Callable, Generic, Iterable, Optional, TypeVar

from ..domain.errors import ThrottleInterruptedError
from ..ports.throttle_port import ThrottlePort

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ThrottledProducer(Generic[T]):
    """Push records from a source into a sink, one throttle() per record.

    The rate can be changed and the loop cancelled from another thread while
    run() is executing.

    Example:
        producer = ThrottledProducer(records, kafka_send, Throttler(1000))
        producer.start()
        producer.adjust_max_records_per_second(5000)
        producer.cancel()
        producer.join()
    """

    def __init__(self, source: Iterable[T], sink: Callable[[T], None], throttler: ThrottlePort) -> None:
        self._source = source
        self._sink = sink
        self._throttler = throttler
        self._cancelled = Event()
        self._emitted = 0
        self._thread: Optional[Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def emitted(self) -> int:
        return self._emitted

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self) -> int:
        """Run until the source is exhausted or cancel() is called.

        Returns:
            Number of records handed to the sink.

        Raises:
            ThrottleInterruptedError: if the throttler was interrupted without cancel().
        """
        logger.info("Throttled producer started")
        try:
            for record in self._source:
                if self._cancelled.is_set():
                    break
                self._sink(record)
                self._emitted += 1
                self._throttler.throttle()
        except ThrottleInterruptedError:
            if not self._cancelled.is_set():
                raise
            logger.debug("Throttle sleep interrupted by cancel()")
        logger.info(f"Throttled producer stopped after {self._emitted} records")
        return self._emitted

    def adjust_max_records_per_second(self, max_records_per_second: int) -> None:
        self._throttler.adjust_max_records_per_second(max_records_per_second)

    def cancel(self) -> None:
        """Stop the loop, waking it if it is sleeping in throttle()."""
        self._cancelled.set()
        self._throttler.interrupt()

    def start(self) -> Thread:
        """Run the producer on a daemon thread."""
        if self._thread is not None:
            raise RuntimeError("producer already started")
        self._thread = Thread(target=self._run_captured, name="throttled-producer", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> int:
        """Wait for the background run; re-raise any error it ended with.

        Raises:
            TimeoutError: if the thread is still running when timeout expires.
        """
        if self._thread is None:
            raise RuntimeError("producer not started")
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError(f"producer still running after {timeout}s")
        if self._error is not None:
            raise self._error
        return self._emitted

    def _run_captured(self) -> None:
        try:
            self.run()
        except BaseException as e:  # surfaced to the caller by join()
            logger.error(f"Throttled producer failed: {e}")
            self._error = e
