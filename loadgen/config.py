"""
Run configuration for the load generator.

Two presets mirror the two dashboards the tool grew out of:

* **dashboard** – ``GET`` against the sample path, 200-entry rolling windows.
* **simple**    – ``POST`` with a JSON ``{"message": ...}`` body, 50 entries.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

# Defaults
DEFAULT_TARGET = "http://127.0.0.1:8080/sample"
DEFAULT_INTERVAL_MS = 1000
DASHBOARD_CAP = 200
SIMPLE_CAP = 50


class Variant(str, Enum):
    DASHBOARD = "dashboard"
    SIMPLE = "simple"


class LoadConfig(BaseModel):
    """Everything the generator needs to know before the first tick."""

    target_url: str = DEFAULT_TARGET
    method: Literal["GET", "POST"] = "GET"
    interval_ms: int = Field(DEFAULT_INTERVAL_MS, gt=0)
    log_cap: int = Field(DASHBOARD_CAP, gt=0)
    chart_cap: int = Field(DASHBOARD_CAP, gt=0)

    @classmethod
    def for_variant(
        cls,
        variant: Variant,
        *,
        target_url: str = DEFAULT_TARGET,
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ) -> "LoadConfig":
        """Return the preset for *variant* pointed at *target_url*."""
        if variant is Variant.SIMPLE:
            return cls(
                target_url=target_url,
                method="POST",
                interval_ms=interval_ms,
                log_cap=SIMPLE_CAP,
                chart_cap=SIMPLE_CAP,
            )
        return cls(
            target_url=target_url,
            method="GET",
            interval_ms=interval_ms,
            log_cap=DASHBOARD_CAP,
            chart_cap=DASHBOARD_CAP,
        )
