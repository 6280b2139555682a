"""
Downstream API client: one authenticated GET, one numeric sample.

The downstream endpoint returns the *current* value only, as a JSON array
whose first element is a number, e.g. ``[1234.5, ...]``.

Notes / Pitfalls:
- The secret goes in a custom header (DP_API_KEY_HEADER), never to clients.
- No retry, no backoff: the caller turns any error into a 500.
- Timeout is unset by default; set DP_HTTP_TIMEOUT_SEC to bound the call.
"""

from __future__ import annotations

import logging

import httpx

from dailyproxy.config import API_KEY_ENV, Settings
from dailyproxy.errors import DownstreamHttpError, MalformedDownstreamPayload, MissingCredential
from dailyproxy.observability import DOWNSTREAM_CALLS, DOWNSTREAM_LATENCY
from dailyproxy.schemas import is_sample_value
from dailyproxy.utils import timer_ms

logger = logging.getLogger(__name__)


def parse_sample(payload: object) -> int | float:
    """Take the first element of a non-empty JSON array; it must be a finite number."""
    if not isinstance(payload, list) or not payload:
        raise MalformedDownstreamPayload("API response is not a non-empty array.")
    first = payload[0]
    if not is_sample_value(first):
        raise MalformedDownstreamPayload(
            f"API response first element is not a number: {first!r}"
        )
    return first


async def fetch_sample(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> int | float:
    if not settings.api_key:
        raise MissingCredential(API_KEY_ENV)

    headers = {settings.api_key_header: settings.api_key}
    outcome = "error"
    with timer_ms() as elapsed_ms:
        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout_s, transport=transport
            ) as client:
                r = await client.get(settings.endpoint_url, headers=headers)
            if not r.is_success:
                outcome = "http_error"
                raise DownstreamHttpError.from_status(r.status_code)
            try:
                payload = r.json()
            except ValueError:
                outcome = "malformed"
                raise MalformedDownstreamPayload("API response is not valid JSON.") from None
            try:
                value = parse_sample(payload)
            except MalformedDownstreamPayload:
                outcome = "malformed"
                raise
            outcome = "ok"
        except httpx.RequestError as e:
            outcome = "request_error"
            raise DownstreamHttpError(f"API request failed: {e}") from e
        finally:
            DOWNSTREAM_CALLS.labels(outcome=outcome).inc()
            DOWNSTREAM_LATENCY.observe(elapsed_ms() / 1000)
            logger.info(
                "Downstream fetch finished",
                extra={"outcome": outcome, "duration_ms": elapsed_ms()},
            )
    return value
