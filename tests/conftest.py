from datetime import UTC, datetime

import httpx
import pytest

from dailyproxy.config import Settings
from dailyproxy.store import MemoryStore


class Clock:
    """Settable clock for both the app (datetime) and the memory store (epoch)."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def epoch(self) -> float:
        return self.now.timestamp()


class Downstream:
    """httpx.MockTransport handler that records calls and replays queued responses."""

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def queue(self, status_code: int = 200, **kwargs) -> None:
        self.responses.append(httpx.Response(status_code, **kwargs))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if not self.responses:
            raise AssertionError("unexpected downstream call")
        return self.responses.pop(0)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        endpoint_url="https://api.example.test/status/charges.json",
        api_key="secret-123",
        timezone="UTC",
    )


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2025, 7, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def store(clock) -> MemoryStore:
    return MemoryStore(clock=clock.epoch)


@pytest.fixture
def downstream() -> Downstream:
    return Downstream()
