"""
FastAPI dashboard around the load generator.

Exposes the run controls (start / stop / interval / reset) and read-only views
of the current snapshot. The ``/logs`` view switches between the compact
dashboard lines and the per-request "network inspector" rows.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from enum import Enum
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from loadgen.config import LoadConfig
from loadgen.model import AggregateStats, ChartPoint, LogEntry, RunState, Snapshot
from loadgen.scheduler import LoadGenerator


# Pydantic models

class IntervalIn(BaseModel):
    interval_ms: int = Field(..., description="Tick period in milliseconds, must be positive")


class StatsOut(BaseModel):
    stats: AggregateStats
    error_rate: str
    avg_latency: str


class LogLine(BaseModel):
    timestamp: str
    status: str
    message: str
    latency_ms: Optional[int] = None


class View(str, Enum):
    DASHBOARD = "dashboard"
    INSPECTOR = "inspector"


def _generator(request: Request) -> LoadGenerator:
    return request.app.state.generator


# App factory

def create_app(generator: Optional[LoadGenerator] = None) -> FastAPI:
    gen = generator or LoadGenerator(LoadConfig())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await gen.close()

    app = FastAPI(title="Load Generator Dashboard", lifespan=lifespan)
    app.state.generator = gen

    @app.get("/state", response_model=Snapshot)
    async def state(request: Request) -> Snapshot:
        return _generator(request).snapshot()

    @app.get("/stats", response_model=StatsOut)
    async def stats(request: Request) -> StatsOut:
        snap = _generator(request).snapshot()
        return StatsOut(stats=snap.stats, error_rate=snap.error_rate, avg_latency=snap.avg_latency)

    @app.get("/logs")
    async def logs(request: Request, view: View = View.DASHBOARD) -> List[dict]:
        entries: List[LogEntry] = _generator(request).snapshot().logs
        if view is View.INSPECTOR:
            return [e.model_dump(mode="json") for e in entries]
        return [
            LogLine(
                timestamp=e.timestamp,
                status=e.status.value.upper(),
                message=e.message,
                latency_ms=e.latency_ms,
            ).model_dump()
            for e in entries
        ]

    @app.get("/chart", response_model=List[ChartPoint])
    async def chart(request: Request) -> List[ChartPoint]:
        return _generator(request).snapshot().chart

    # Controls
    @app.post("/start", response_model=RunState)
    async def start(request: Request) -> RunState:
        gen_ = _generator(request)
        gen_.start()
        return gen_.run

    @app.post("/stop", response_model=RunState)
    async def stop(request: Request) -> RunState:
        gen_ = _generator(request)
        gen_.stop()
        return gen_.run

    @app.put("/interval", response_model=RunState)
    async def set_interval(body: IntervalIn, request: Request) -> RunState:
        gen_ = _generator(request)
        try:
            changed = gen_.set_interval(body.interval_ms)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
        if not changed:
            raise HTTPException(status_code=409, detail="Cannot change interval while running")
        return gen_.run

    @app.post("/reset", response_model=StatsOut)
    async def reset(request: Request) -> StatsOut:
        gen_ = _generator(request)
        if not await gen_.reset():
            raise HTTPException(status_code=409, detail="Cannot reset while running")
        snap = gen_.snapshot()
        return StatsOut(stats=snap.stats, error_rate=snap.error_rate, avg_latency=snap.avg_latency)

    return app


app = create_app()
