"""
Single-writer owner of the aggregate stats, the request log and the latency chart.

Concurrently settling requests never touch shared state themselves: they
``publish`` their :class:`~loadgen.model.LogEntry` into an :class:`asyncio.Queue`
and one consumer task applies each message synchronously, so counters cannot
lose updates and readers never see a half-applied settlement.

Message kinds
~~~~~~~~~~~~~
* pending entry → appended to the log window.
* settled entry → counters bumped, log row replaced by id, chart point appended.
* reset marker  → everything cleared to zero / empty.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Union

from loadgen.model import (
    AggregateStats,
    ChartPoint,
    LogEntry,
    RunState,
    Snapshot,
    Status,
    avg_latency,
    error_rate,
)
from loadgen.window import RollingWindow

logger = logging.getLogger(__name__)


class _Reset:
    def __repr__(self) -> str:  # pragma: no cover
        return "<reset>"


RESET = _Reset()
Message = Union[LogEntry, _Reset]


class MetricsStore:
    def __init__(self, log_cap: int, chart_cap: int) -> None:
        self.stats = AggregateStats()
        self.logs: RollingWindow[LogEntry] = RollingWindow(log_cap)
        self.chart: RollingWindow[ChartPoint] = RollingWindow(chart_cap)
        self._queue: Optional[asyncio.Queue[Message]] = None
        self._consumer: Optional[asyncio.Task[None]] = None
        self.on_settled: List[Callable[[LogEntry], None]] = []

    # Actor lifecycle

    def start(self) -> asyncio.Queue[Message]:
        """Spawn the consumer on the running loop (idempotent); return its queue."""
        if self._queue is not None and self._consumer is not None and not self._consumer.done():
            return self._queue
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError("MetricsStore needs a running asyncio event loop") from None
        queue: asyncio.Queue[Message] = asyncio.Queue()
        self._queue = queue
        self._consumer = loop.create_task(self._consume(queue))
        return queue

    async def drain(self) -> None:
        """Wait until every message published so far has been applied."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        await self.drain()
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
            self._queue = None

    # Writers

    def publish(self, message: Message) -> None:
        self.start().put_nowait(message)

    async def reset(self) -> None:
        """Clear stats, log and chart once everything queued before it is applied."""
        self.publish(RESET)
        await self.drain()

    # Reader

    def snapshot(self, run: RunState) -> Snapshot:
        stats = self.stats.model_copy()
        return Snapshot(
            run=run.model_copy(),
            stats=stats,
            error_rate=error_rate(stats),
            avg_latency=avg_latency(stats),
            logs=self.logs.to_list(),
            chart=self.chart.to_list(),
        )

    # Consumer

    async def _consume(self, queue: asyncio.Queue[Message]) -> None:
        while True:
            message = await queue.get()
            try:
                self._apply(message)
            except Exception:
                logger.exception("failed to apply %r", message)
            finally:
                queue.task_done()

    def _apply(self, message: Message) -> None:
        if isinstance(message, _Reset):
            self.stats = AggregateStats()
            self.logs.clear()
            self.chart.clear()
            logger.info("metrics reset")
            return

        if message.status is Status.PENDING:
            self.logs.append(message)
            return

        latency = message.latency_ms or 0
        self.stats.total += 1
        if message.status is Status.SUCCESS:
            self.stats.success += 1
        else:
            self.stats.error += 1
        self.stats.total_latency_ms += latency

        # Row may already be gone (evicted or reset); counters still apply
        self.logs.replace(lambda e: e.id == message.id and not e.settled, message)
        self.chart.append(
            ChartPoint(time=datetime.now().strftime("%H:%M:%S"), latency_ms=latency)
        )
        for callback in self.on_settled:
            callback(message)
