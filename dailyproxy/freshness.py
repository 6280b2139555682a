# dailyproxy/freshness.py
# Purpose: Decide whether the cached record can be served as-is.
# Rule: fresh iff the record was produced on the same calendar day as "now".
# Pitfalls: The day boundary depends on the zone; tz=None means the host's local zone.

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from enum import Enum

from dailyproxy.schemas import CacheRecord
from dailyproxy.utils import parse_instant


class Freshness(str, Enum):
    FRESH = "FRESH"
    STALE = "STALE"


@dataclass(frozen=True)
class Decision:
    state: Freshness
    record: CacheRecord | None = None

    @property
    def fresh(self) -> bool:
        return self.state is Freshness.FRESH


STALE = Decision(Freshness.STALE)


def _local_date(dt: datetime, tz: tzinfo | None):
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    # astimezone(None) converts to the host's local zone
    return dt.astimezone(tz).date()


def same_calendar_day(a: datetime, b: datetime, tz: tzinfo | None = None) -> bool:
    """Compare the calendar dates of two aware instants as seen in ``tz``."""
    return _local_date(a, tz) == _local_date(b, tz)


def decide(cached: CacheRecord | None, now: datetime, tz: tzinfo | None = None) -> Decision:
    if cached is None:
        return STALE
    produced_at = parse_instant(cached.timestamp)
    if produced_at is None:
        return STALE
    if same_calendar_day(produced_at, now, tz):
        return Decision(Freshness.FRESH, cached)
    return STALE
