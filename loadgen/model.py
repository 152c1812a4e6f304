"""
Core data-model classes for the load generator.

Includes:
* **RunState**, **AggregateStats**, **LogEntry**, **ChartPoint**, **Snapshot**
* Derived metrics ``error_rate`` / ``avg_latency`` (pure functions of the stats).
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


# Enums

class Status(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


# Core model classes

class RunState(BaseModel):
    is_running: bool = False
    interval_ms: int


class AggregateStats(BaseModel):
    """Cumulative counters; ``total == success + error`` once settled."""

    total: int = 0
    success: int = 0
    error: int = 0
    total_latency_ms: int = 0


class LogEntry(BaseModel):
    """One dispatched request. Settling produces a new instance with the same id."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    timestamp: str
    started_at_epoch_ms: int
    status: Status = Status.PENDING
    status_code: Optional[int] = None
    message: str = ""
    latency_ms: Optional[int] = None

    @property
    def settled(self) -> bool:
        return self.status is not Status.PENDING

    def settle(
        self,
        status: Status,
        *,
        latency_ms: int,
        message: str,
        status_code: Optional[int] = None,
    ) -> "LogEntry":
        """Return the terminal copy of this pending entry."""
        if self.settled:
            raise ValueError(f"log entry {self.id} already settled as {self.status.value}")
        if status is Status.PENDING:
            raise ValueError("cannot settle into the pending state")
        return self.model_copy(
            update={
                "status": status,
                "status_code": status_code,
                "message": message,
                "latency_ms": latency_ms,
            }
        )


class ChartPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str
    latency_ms: float


class Snapshot(BaseModel):
    """Everything a renderer needs, captured in one consistent read."""

    run: RunState
    stats: AggregateStats
    error_rate: str
    avg_latency: str
    logs: List[LogEntry] = []
    chart: List[ChartPoint] = []


# Derived metrics

def error_rate(stats: AggregateStats) -> str:
    """Percentage of settled requests that failed, ``"0.00"`` before any."""
    if stats.total == 0:
        return "0.00"
    return f"{stats.error / stats.total * 100:.2f}"


def avg_latency(stats: AggregateStats) -> str:
    """Mean latency in ms over settled requests, ``"0.00"`` before any."""
    if stats.total == 0:
        return "0.00"
    return f"{stats.total_latency_ms / stats.total:.2f}"
