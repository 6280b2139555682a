from __future__ import annotations

import json
import logging
import math
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


# --- Cached record (stored value and /api/data body) ---
class CacheRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    timestamp: str  # ISO-8601 UTC, e.g. "2025-07-01T12:00:00.000Z"
    historicalValues: tuple[int | float, ...] = Field(default_factory=tuple)
    historicalDates: tuple[str, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _parallel_series(self) -> CacheRecord:
        if len(self.historicalValues) != len(self.historicalDates):
            raise ValueError(
                f"series length mismatch: {len(self.historicalValues)} values, "
                f"{len(self.historicalDates)} dates"
            )
        return self


# --- Health payload ---
class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = "ok"
    as_of: str
    service: str = "dailyproxy"
    store: Literal["memory", "redis"]
    credential_configured: bool


# --- Version payload ---
class VersionResponse(BaseModel):
    service: str  # "dailyproxy:0.1.0"
    service_version: str


# --- Error taxonomy ---
class ErrorCode(str, Enum):
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    DOWNSTREAM_HTTP_ERROR = "DOWNSTREAM_HTTP_ERROR"
    MALFORMED_DOWNSTREAM_PAYLOAD = "MALFORMED_DOWNSTREAM_PAYLOAD"
    STORE_ERROR = "STORE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    error: str


def is_sample_value(v: Any) -> bool:
    """True for finite ints/floats; bools are not samples."""
    if isinstance(v, bool) or not isinstance(v, int | float):
        return False
    try:
        return math.isfinite(v)
    except OverflowError:
        # int too large to convert to float
        return False


def load_record(raw: str | bytes | None) -> CacheRecord | None:
    """
    Parse a stored record, tolerating partial or legacy shapes.

    - undecodable JSON / non-object -> None (treated as absent)
    - missing or non-list series fields -> empty series
    - values and dates of different length are aligned on their newest entries
    - a pair with a bad value or bad label is dropped as a pair
    """
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Cached record is not valid JSON; ignoring it.")
        return None
    if not isinstance(data, dict):
        logger.warning("Cached record is not a JSON object; ignoring it.")
        return None

    ts = data.get("timestamp")
    values = data.get("historicalValues")
    dates = data.get("historicalDates")
    values = values if isinstance(values, list) else []
    dates = dates if isinstance(dates, list) else []

    n = min(len(values), len(dates))
    pairs = zip(values[len(values) - n :], dates[len(dates) - n :], strict=True)
    kept = [(v, d) for v, d in pairs if is_sample_value(v) and isinstance(d, str)]

    return CacheRecord(
        timestamp=ts if isinstance(ts, str) else "",
        historicalValues=tuple(v for v, _ in kept),
        historicalDates=tuple(d for _, d in kept),
    )
