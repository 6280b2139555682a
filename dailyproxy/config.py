# dailyproxy/config.py
# Purpose: Process-wide settings (endpoint, secret, cache key, TTLs, window size).
# Why: Passed explicitly into the handler so tests can vary them.
# Pitfalls: DP_API_KEY is checked per request, not here; a missing key is a 500, not a crash.

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_API_ENDPOINT = "https://tycoon-2epova.users.cfx.re/status/charges.json"
DEFAULT_CACHE_KEY = "api_data_cache"
RETENTION_TTL_SEC = 60 * 60 * 48  # 48 hours
MAX_DAYS = 30

API_KEY_ENV = "DP_API_KEY"

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env_str(name: str) -> str | None:
    v = (os.getenv(name) or "").strip()
    return v or None


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str) -> float | None:
    raw = _env_str(name)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env_str(name)
    if raw is None:
        return default
    return raw.lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    endpoint_url: str = DEFAULT_API_ENDPOINT
    api_key: str | None = None
    api_key_header: str = "X-Tycoon-Key"
    cache_key: str = DEFAULT_CACHE_KEY
    retention_ttl_s: int = RETENTION_TTL_SEC
    max_days: int = MAX_DAYS
    # None -> host local zone
    timezone: str | None = None
    redis_url: str | None = None
    refresh_lease: bool = False
    lease_ttl_s: int = 30
    # None -> no explicit timeout on the downstream call
    http_timeout_s: float | None = None

    def __post_init__(self) -> None:
        if self.max_days < 1:
            raise ValueError(f"max_days must be >= 1, got {self.max_days}")
        if self.retention_ttl_s <= 0:
            raise ValueError(f"retention_ttl_s must be positive, got {self.retention_ttl_s}")
        if self.lease_ttl_s <= 0:
            raise ValueError(f"lease_ttl_s must be positive, got {self.lease_ttl_s}")
        if self.timezone is not None:
            # fail at load time rather than on the first request
            self.tz()

    @property
    def lease_key(self) -> str:
        return f"{self.cache_key}:lease"

    def tz(self) -> tzinfo | None:
        if self.timezone is None:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone: {self.timezone}") from None

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            endpoint_url=_env_str("DP_API_ENDPOINT") or DEFAULT_API_ENDPOINT,
            api_key=_env_str(API_KEY_ENV),
            api_key_header=_env_str("DP_API_KEY_HEADER") or "X-Tycoon-Key",
            cache_key=_env_str("DP_CACHE_KEY") or DEFAULT_CACHE_KEY,
            retention_ttl_s=_env_int("DP_RETENTION_TTL_SEC", RETENTION_TTL_SEC),
            max_days=_env_int("DP_MAX_DAYS", MAX_DAYS),
            timezone=_env_str("DP_TIMEZONE"),
            redis_url=_env_str("DP_REDIS_URL"),
            refresh_lease=_env_bool("DP_REFRESH_LEASE"),
            lease_ttl_s=_env_int("DP_LEASE_TTL_SEC", 30),
            http_timeout_s=_env_float("DP_HTTP_TIMEOUT_SEC"),
        )
