"""
One request/response cycle against the sample endpoint.

* A *pending* :class:`~loadgen.model.LogEntry` is published before the call.
* 2xx responses settle as **success**, everything else as **error**, including
  transport failures (``status_code`` stays ``None``) and ``POST`` bodies that
  cannot be read (``status_code`` is kept).
* Latency is monotonic wall time between dispatch and settlement, rounded to
  the nearest millisecond.
* No retries and no timeout: every tick is a one-shot attempt.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from loadgen.config import LoadConfig
from loadgen.model import LogEntry, Status

logger = logging.getLogger(__name__)

Publish = Callable[[LogEntry], None]
NETWORK_ERROR = "Network Error"


# Helper functions

def _clock_time() -> str:
    """Local wall-clock time as shown in the log (``HH:MM:SS``)."""
    return datetime.now().strftime("%H:%M:%S")


def new_pending_entry() -> LogEntry:
    return LogEntry(
        id=uuid.uuid4(),
        timestamp=_clock_time(),
        started_at_epoch_ms=int(time.time() * 1000),
    )


def _request_body() -> dict:
    return {"message": f"Request from loadgen at {datetime.now(timezone.utc).isoformat()}"}


def _success_message(method: str, resp: httpx.Response) -> str:
    if method != "POST":
        return f"{resp.status_code} {resp.reason_phrase}"
    # Unparseable body raises into execute() and settles as an error
    return f"ID: {resp.json()['id']} - Created successfully"


def _round_ms(ms: float) -> int:
    """Nearest millisecond, halves rounded up."""
    return int(ms + 0.5)


def _elapsed_ms(start: float, clock: Callable[[], float]) -> int:
    return _round_ms((clock() - start) * 1000)


# Public API

async def execute(
    client: httpx.AsyncClient,
    config: LoadConfig,
    publish: Publish,
    *,
    clock: Callable[[], float] = time.perf_counter,
) -> LogEntry:
    """Fire one request, publish its pending and settled entries, return the latter."""
    entry = new_pending_entry()
    start = clock()
    publish(entry)
    logger.debug("dispatch %s %s %s", entry.id, config.method, config.target_url)

    status_code: Optional[int] = None
    latency: Optional[int] = None
    try:
        if config.method == "POST":
            resp = await client.post(config.target_url, json=_request_body())
        else:
            resp = await client.get(config.target_url)
        latency = _elapsed_ms(start, clock)
        status_code = resp.status_code
        if resp.is_success:
            settled = entry.settle(
                Status.SUCCESS,
                latency_ms=latency,
                status_code=status_code,
                message=_success_message(config.method, resp),
            )
        else:
            settled = entry.settle(
                Status.ERROR,
                latency_ms=latency,
                status_code=status_code,
                message=f"Status: {resp.status_code} {resp.reason_phrase}".rstrip(),
            )
    except Exception as exc:  # any failure becomes an error row, never a crash
        if latency is None:
            latency = _elapsed_ms(start, clock)
        logger.warning("request %s failed: %r", entry.id, exc)
        settled = entry.settle(
            Status.ERROR,
            latency_ms=latency,
            status_code=status_code,
            message=str(exc) or NETWORK_ERROR,
        )

    publish(settled)
    logger.debug("settled %s %s in %d ms", settled.id, settled.status.value, settled.latency_ms)
    return settled
