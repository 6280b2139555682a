# dailyproxy/store.py
# Purpose: Key-value store with per-key expiry holding the cached record.
# Why: All state lives here; requests are otherwise stateless.
# Pitfalls: MemoryStore is not persistent and not shared across workers; use Redis in production.

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis

from dailyproxy.config import Settings
from dailyproxy.errors import StoreError

logger = logging.getLogger(__name__)


class KVStore(Protocol):
    backend: str

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, ttl_s: int) -> None: ...

    def add(self, key: str, value: str, ttl_s: int) -> bool:
        """Set only if absent; True if this call stored the value."""
        ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    backend = "memory"

    def __init__(self, clock: Callable[[], float] = time.time):
        # key -> (expiry_epoch, value)
        self._data: dict[str, tuple[float, str]] = {}
        self._clock = clock

    def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if not entry:
            return None
        expiry, value = entry
        if self._clock() >= expiry:
            # expired
            self._data.pop(key, None)
            return None
        return value

    def put(self, key: str, value: str, ttl_s: int) -> None:
        self._data[key] = (self._clock() + ttl_s, value)

    def add(self, key: str, value: str, ttl_s: int) -> bool:
        if self.get(key) is not None:
            return False
        self.put(key, value, ttl_s)
        return True

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStore:
    backend = "redis"

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            raise StoreError("read", e) from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def put(self, key: str, value: str, ttl_s: int) -> None:
        try:
            self._client.set(key, value, ex=ttl_s)
        except redis.RedisError as e:
            raise StoreError("write", e) from e

    def add(self, key: str, value: str, ttl_s: int) -> bool:
        try:
            return bool(self._client.set(key, value, ex=ttl_s, nx=True))
        except redis.RedisError as e:
            raise StoreError("write", e) from e

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            raise StoreError("delete", e) from e


def build_store(settings: Settings) -> KVStore:
    if settings.redis_url:
        return RedisStore.from_url(settings.redis_url)
    logger.warning("DP_REDIS_URL not set; using in-memory store (not persistent).")
    return MemoryStore()
