"""
History updater: fetch one sample and roll it into the bounded daily series.

The series is a fixed-capacity window (values + display labels kept in
lockstep). Appending past capacity drops the oldest entry, so the window
always holds the most recent ``max_days`` samples, oldest first.

Labels are display strings ("Jul 20") stamped once at append time; they are
never parsed back or recomputed for past entries.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime, tzinfo

from dailyproxy.config import MAX_DAYS
from dailyproxy.schemas import CacheRecord
from dailyproxy.utils import to_iso

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

Sample = int | float
SampleFetcher = Callable[[], Awaitable[Sample]]


def date_label(now: datetime, tz: tzinfo | None = None) -> str:
    """Short month + day in ``tz`` (host local zone if None), e.g. 'Jul 1'."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    local = now.astimezone(tz)
    return f"{_MONTHS[local.month - 1]} {local.day}"


class SeriesWindow:
    """Fixed-capacity window of (value, label) samples, oldest first."""

    def __init__(
        self,
        max_days: int = MAX_DAYS,
        values: Iterable[Sample] = (),
        dates: Iterable[str] = (),
    ):
        if max_days < 1:
            raise ValueError(f"max_days must be >= 1, got {max_days}")
        values, dates = list(values), list(dates)
        if len(values) != len(dates):
            raise ValueError(f"series length mismatch: {len(values)} values, {len(dates)} dates")
        # deque(maxlen) keeps the newest entries when seeded with a longer series
        self._values: deque[Sample] = deque(values, maxlen=max_days)
        self._dates: deque[str] = deque(dates, maxlen=max_days)

    @classmethod
    def from_record(cls, record: CacheRecord | None, max_days: int = MAX_DAYS) -> SeriesWindow:
        if record is None:
            return cls(max_days)
        return cls(max_days, record.historicalValues, record.historicalDates)

    def __len__(self) -> int:
        return len(self._values)

    def append(self, value: Sample, label: str) -> None:
        self._values.append(value)
        self._dates.append(label)

    @property
    def values(self) -> tuple[Sample, ...]:
        return tuple(self._values)

    @property
    def dates(self) -> tuple[str, ...]:
        return tuple(self._dates)


async def refresh(
    prior: CacheRecord | None,
    now: datetime,
    fetch_sample: SampleFetcher,
    *,
    max_days: int = MAX_DAYS,
    tz: tzinfo | None = None,
) -> CacheRecord:
    """
    Build the next record from ``prior`` plus one freshly fetched sample.

    Calls ``fetch_sample`` exactly once. Any error it raises propagates and no
    record is produced; ``prior`` is never modified. Persisting the result is
    the caller's job.
    """
    window = SeriesWindow.from_record(prior, max_days)
    value = await fetch_sample()
    window.append(value, date_label(now, tz))
    return CacheRecord(
        timestamp=to_iso(now),
        historicalValues=window.values,
        historicalDates=window.dates,
    )
