# dailyproxy/handler.py
# Purpose: Wire store -> freshness gate -> history updater -> store for one request.
# Why: Keeps the route thin and the flow testable without HTTP.
# Pitfalls: Without the optional lease, concurrent stale requests may each fetch and
#           each write (last write wins).

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from dailyproxy.config import Settings
from dailyproxy.errors import StoreError
from dailyproxy.freshness import decide
from dailyproxy.history import SampleFetcher, refresh
from dailyproxy.observability import CACHE_DECISIONS
from dailyproxy.schemas import CacheRecord, load_record
from dailyproxy.store import KVStore
from dailyproxy.utils import to_iso, utc_now

logger = logging.getLogger(__name__)


class DataHandler:
    def __init__(
        self,
        settings: Settings,
        store: KVStore,
        fetch_sample: SampleFetcher,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings
        self.store = store
        self.fetch_sample = fetch_sample
        self.clock = clock
        self._tz = settings.tz()

    def read_cached(self) -> CacheRecord | None:
        return load_record(self.store.get(self.settings.cache_key))

    def _acquire_lease(self, now: datetime) -> bool:
        return self.store.add(self.settings.lease_key, to_iso(now), self.settings.lease_ttl_s)

    def _release_lease(self) -> None:
        # the lease expires on its own; a failed delete must not change the request outcome
        try:
            self.store.delete(self.settings.lease_key)
        except StoreError as e:
            logger.warning("Could not release refresh lease: %s", e.message, extra={"code": e.code.value})

    async def handle(self) -> CacheRecord:
        """Return today's record, refreshing and persisting it first when stale."""
        now = self.clock()
        cached = self.read_cached()

        decision = decide(cached, now, self._tz)
        CACHE_DECISIONS.labels(state=decision.state.value).inc()
        if decision.fresh:
            logger.info("Returning fresh data from cache.", extra={"state": decision.state.value})
            return decision.record

        logger.info(
            "Cache is stale or missing. Fetching new data from API.",
            extra={"state": decision.state.value},
        )

        lease_held = False
        if self.settings.refresh_lease:
            lease_held = self._acquire_lease(now)
            if not lease_held and cached is not None:
                logger.info("Refresh already in progress; serving previous record.")
                return cached

        try:
            record = await refresh(
                cached, now, self.fetch_sample, max_days=self.settings.max_days, tz=self._tz
            )
            self.store.put(
                self.settings.cache_key, record.model_dump_json(), self.settings.retention_ttl_s
            )
        finally:
            if lease_held:
                self._release_lease()

        logger.info(
            "Successfully fetched and cached new data.",
            extra={"cache_key": self.settings.cache_key},
        )
        return record
