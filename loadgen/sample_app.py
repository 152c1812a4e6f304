"""
Stand-in for the sample backend the generator is pointed at.

Same routes as the real service (``/``, ``/hostname``, ``/sample``) but samples
live in process memory only, capped at the newest ``MAX_SAMPLES``; useful as a
local target and as an ASGI transport in tests.
"""

from __future__ import annotations

import itertools
import socket
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

app = FastAPI(title="Sample endpoint")

MAX_SAMPLES = 1000

_SAMPLES: List["SampleOut"] = []
_IDS = itertools.count(1)


# Pydantic models

class SampleIn(BaseModel):
    message: str = Field(..., description="Free-text payload")


class SampleOut(BaseModel):
    id: int
    message: str
    created_at: datetime


# Test helpers (pytest only)
def _clear() -> None:  # noqa: D401
    """Forget every stored sample – used by pytest."""
    global _IDS
    _SAMPLES.clear()
    _IDS = itertools.count(1)


@app.get("/", response_class=PlainTextResponse)
def hello() -> str:
    return "Hello, World!"


@app.get("/hostname")
def hostname() -> dict:
    return {"hostname": socket.gethostname()}


@app.get("/sample", response_model=List[SampleOut])
def list_samples() -> List[SampleOut]:
    return list(_SAMPLES)


@app.post("/sample", response_model=SampleOut, status_code=201)
def create_sample(s: SampleIn) -> SampleOut:
    sample = SampleOut(id=next(_IDS), message=s.message, created_at=datetime.now(timezone.utc))
    _SAMPLES.append(sample)
    del _SAMPLES[:-MAX_SAMPLES]
    return sample
