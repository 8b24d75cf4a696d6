from __future__ import annotations

"""stream_throttler.app.cli
=================================
Command-line interface powered by Typer.

Usage examples
--------------
$ stream-throttler params 9999                     # show batching for a rate
$ stream-throttler run --rate 500 --count 2000     # pump synthetic records at 500/s
$ stream-throttler --log-level INFO run --rate 20000 --count 100000
"""

import logging
import time
from enum import Enum
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from .api import StreamThrottlerClient
from ..config.settings import ThrottlerSettings
from ..core.domain.errors import InvalidThrottleRateError

app = typer.Typer(add_completion=False, help="Stream Throttler")


class LogLevel(str, Enum):
    OFF = "OFF"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    NOTSET = "NOTSET"


def configure_logging(log_level: Optional[str]) -> None:
    """Attach a stderr handler to the package logger at the given level. OFF/None does nothing."""
    if log_level is None or log_level.upper() == LogLevel.OFF.value:
        return
    level = logging.getLevelNamesMapping().get(log_level.upper(), logging.INFO)

    package_name = __package__.split(".", 1)[0] if __package__ else "stream_throttler"
    logger = logging.getLogger(package_name)

    has_stream = any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    if not has_stream:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    # Only this logger prints; avoids duplicates through root handlers
    logger.propagate = False
    logger.setLevel(level)


@app.callback()
def main(
    log_level: Annotated[
        Optional[LogLevel],
        typer.Option(
            "--log-level",
            help="Set log level (OFF, CRITICAL, ERROR, WARNING, INFO, DEBUG, NOTSET). Default: OFF",
        ),
    ] = None,
) -> None:
    """Root command callback to configure logging if requested."""
    if log_level is not None:
        configure_logging(log_level.value)
        return
    # Fall back to STREAM_THROTTLER_LOG_LEVEL when the option is omitted
    try:
        settings = ThrottlerSettings()
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)
    configure_logging(settings.log_level)


@app.command(help="Show the regime, batch size and batch duration a rate maps to.")
def params(
    rate: int = typer.Argument(..., help="Max records per second (-1 for unlimited)"),
) -> None:
    try:
        p = StreamThrottlerClient.parameters(rate)
    except InvalidThrottleRateError as e:
        typer.echo(f"Invalid rate: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Regime: {p.regime.value}")
    typer.echo(f"Batch size: {p.throttle_batch_size}")
    typer.echo(f"Nanos per batch: {p.nanos_per_batch}")


@app.command(help="Pump synthetic records through a throttled producer and report the achieved rate.")
def run(
    rate: Optional[int] = typer.Option(
        None,
        "--rate",
        "-r",
        help="Max records per second (-1 for unlimited). Default: STREAM_THROTTLER_MAX_RECORDS_PER_SECOND or -1",
    ),
    count: int = typer.Option(1000, "--count", "-n", min=0, help="Number of records to emit"),
) -> None:
    if rate is not None:
        try:
            StreamThrottlerClient.parameters(rate)
        except InvalidThrottleRateError as e:
            typer.echo(f"Invalid rate: {e}", err=True)
            raise typer.Exit(code=1)

    try:
        client = StreamThrottlerClient()
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)

    with client:
        producer = client.producer(range(count), lambda _record: None, max_records_per_second=rate)
        start = time.monotonic()
        thread = producer.start()
        try:
            while thread.is_alive():
                thread.join(0.1)
        except KeyboardInterrupt:
            typer.echo("Cancelling...", err=True)
            producer.cancel()
        emitted = producer.join()
        elapsed = time.monotonic() - start

    achieved = emitted / elapsed if elapsed > 0 else float("inf")
    typer.echo(f"Records emitted: {emitted}")
    typer.echo(f"Elapsed: {elapsed:.3f}s")
    typer.echo(f"Achieved rate: {achieved:.1f} records/s")


if __name__ == "__main__":  # pragma: no cover
    app()
