"""
Command-line interface (CLI) for the load generator.

Example – headless run against a local sample endpoint
-------------------------------------------------------
    loadgen sample --port 8080 &
    loadgen run http://127.0.0.1:8080/sample \
           --interval-ms 250 \
           --variant simple \
           --duration 10
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx
import typer

from loadgen.config import DEFAULT_INTERVAL_MS, DEFAULT_TARGET, LoadConfig, Variant
from loadgen.model import LogEntry, Snapshot, Status
from loadgen.scheduler import LoadGenerator

# Swapped for an ASGI/mock transport by the test-suite
_TRANSPORT: Optional[httpx.AsyncBaseTransport] = None

# Typer application instance
app = typer.Typer(
    add_completion=False,
    help="Periodic request load generator with rolling success/error/latency stats.",
)


# Helper functions

def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _echo_entry(entry: LogEntry) -> None:
    colour = typer.colors.GREEN if entry.status is Status.SUCCESS else typer.colors.RED
    status = typer.style(entry.status.value.upper(), fg=colour, bold=True)
    typer.echo(f"[{entry.timestamp}] {status} {entry.message} {entry.latency_ms}ms")


def _echo_summary(snap: Snapshot) -> None:
    s = snap.stats
    typer.echo(
        f"Total: {s.total}  Success: {s.success}  Errors: {s.error}  "
        f"Error rate: {snap.error_rate}%  Avg latency: {snap.avg_latency} ms"
    )


async def _run(config: LoadConfig, duration: float, quiet: bool) -> Snapshot:
    gen = LoadGenerator(config, transport=_TRANSPORT)
    if not quiet:
        gen.store.on_settled.append(_echo_entry)
    gen.start()
    try:
        await asyncio.sleep(duration)
    finally:
        gen.stop()
        await gen.wait_in_flight()
        snap = gen.snapshot()
        await gen.close()
    return snap


# Commands

@app.command()
def run(
    url: str = typer.Argument(DEFAULT_TARGET, help="Sample endpoint to hit"),
    interval_ms: int = typer.Option(
        DEFAULT_INTERVAL_MS, "--interval-ms", "-i", min=1, help="Tick period in milliseconds"
    ),
    variant: Variant = typer.Option(
        Variant.DASHBOARD, "--variant", help="dashboard (GET, 200 rows) or simple (POST, 50 rows)"
    ),
    duration: float = typer.Option(10.0, "--duration", "-d", min=0, help="Seconds to keep ticking"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the summary"),
    fail_on_error: bool = typer.Option(
        False, "--fail-on-error", help="Exit with 1 if any request failed"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Tick for *duration* seconds, print every settled request, then a summary."""
    _setup_logging(verbose)
    config = LoadConfig.for_variant(variant, target_url=url, interval_ms=interval_ms)

    snap = asyncio.run(_run(config, duration, quiet))

    _echo_summary(snap)
    if fail_on_error and snap.stats.error:
        raise typer.Exit(code=1)


@app.command()
def serve(
    target: str = typer.Option(DEFAULT_TARGET, "--target", "-t", help="Sample endpoint to hit"),
    variant: Variant = typer.Option(Variant.DASHBOARD, "--variant"),
    interval_ms: int = typer.Option(DEFAULT_INTERVAL_MS, "--interval-ms", "-i", min=1),
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port", "-p"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Run the dashboard API (controls + live stats) under uvicorn."""
    import uvicorn

    from loadgen.api import create_app

    _setup_logging(verbose)
    config = LoadConfig.for_variant(variant, target_url=target, interval_ms=interval_ms)
    uvicorn.run(create_app(LoadGenerator(config)), host=host, port=port)


@app.command()
def sample(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8080, "--port", "-p"),
) -> None:
    """Run the in-memory sample endpoint under uvicorn."""
    import uvicorn

    from loadgen.sample_app import app as sample_app

    uvicorn.run(sample_app, host=host, port=port)


# ``python -m loadgen.cli`` entry-point

def main() -> None:  # pragma: no cover
    """Entry-point for ``python -m loadgen.cli``."""
    app()


if __name__ == "__main__":
    app()
