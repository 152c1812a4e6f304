"""
Timer-driven request loop.

:class:`LoadGenerator` owns the run state, one ``httpx.AsyncClient`` and the
:class:`~loadgen.store.MetricsStore`. While running, a background task sleeps
for ``interval_ms`` and then fires one request per tick as a fire-and-forget
task, so slow requests may overlap in flight. Stopping cancels the timer only;
requests already sent still settle and update the metrics.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

import httpx

from loadgen.config import LoadConfig
from loadgen.executor import execute
from loadgen.model import LogEntry, RunState, Snapshot
from loadgen.store import MetricsStore

logger = logging.getLogger(__name__)


class LoadGenerator:
    def __init__(
        self,
        config: Optional[LoadConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or LoadConfig()
        self.run = RunState(interval_ms=self.config.interval_ms)
        self.store = MetricsStore(self.config.log_cap, self.config.chart_cap)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._timer: Optional[asyncio.Task[None]] = None
        self._in_flight: Set[asyncio.Task[LogEntry]] = set()

    @property
    def is_running(self) -> bool:
        return self.run.is_running

    # Controls

    def start(self) -> bool:
        """Begin ticking every ``interval_ms``; ``False`` if already running."""
        if self.run.is_running:
            return False
        self.store.start()
        self.run.is_running = True
        self._timer = asyncio.get_running_loop().create_task(self._tick_loop())
        logger.info("load generator started (%d ms, %s %s)",
                    self.run.interval_ms, self.config.method, self.config.target_url)
        return True

    def stop(self) -> bool:
        """Cancel future ticks; in-flight requests keep settling."""
        if not self.run.is_running:
            return False
        self.run.is_running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.info("load generator stopped (%d in flight)", len(self._in_flight))
        return True

    def set_interval(self, interval_ms: int) -> bool:
        """Change the tick period for the next start; ignored while running."""
        if self.run.is_running:
            return False
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.run.interval_ms = interval_ms
        return True

    async def reset(self) -> bool:
        """Zero the stats and empty log/chart; ignored while running."""
        if self.run.is_running:
            return False
        await self.store.reset()
        return True

    # Dispatch

    def dispatch(self) -> asyncio.Task[LogEntry]:
        """Fire one request without waiting for it."""
        self.store.start()
        task = asyncio.get_running_loop().create_task(
            execute(self._get_client(), self.config, self.store.publish)
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def wait_in_flight(self) -> None:
        """Await every outstanding request and apply its settlement."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
        await self.store.drain()

    def snapshot(self) -> Snapshot:
        return self.store.snapshot(self.run)

    async def close(self) -> None:
        self.stop()
        await self.wait_in_flight()
        await self.store.close()
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Internals

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport, timeout=None)
        return self._client

    async def _tick_loop(self) -> None:
        interval = self.run.interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            try:
                self.dispatch()
            except Exception:
                logger.exception("dispatch failed")
