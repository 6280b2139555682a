import asyncio
from dataclasses import replace

import httpx
import pytest

from dailyproxy.downstream import fetch_sample, parse_sample
from dailyproxy.errors import DownstreamHttpError, MalformedDownstreamPayload, MissingCredential


def _fetch(settings, downstream):
    return asyncio.run(fetch_sample(settings, transport=downstream.transport()))


def test_sends_secret_in_custom_header(settings, downstream):
    downstream.queue(json=[1234.5, 99])
    assert _fetch(settings, downstream) == 1234.5
    (req,) = downstream.calls
    assert req.method == "GET"
    assert str(req.url) == settings.endpoint_url
    assert req.headers["X-Tycoon-Key"] == "secret-123"


def test_header_name_is_configurable(settings, downstream):
    downstream.queue(json=[1])
    _fetch(replace(settings, api_key_header="X-Api-Key"), downstream)
    assert downstream.calls[0].headers["X-Api-Key"] == "secret-123"


def test_missing_credential_fails_before_any_call(settings, downstream):
    with pytest.raises(MissingCredential, match="DP_API_KEY"):
        _fetch(replace(settings, api_key=None), downstream)
    assert downstream.calls == []


def test_non_2xx_status(settings, downstream):
    downstream.queue(503, text="unavailable")
    with pytest.raises(DownstreamHttpError) as ei:
        _fetch(settings, downstream)
    assert ei.value.message == "API responded with status: 503"
    assert ei.value.status_code == 503


def test_network_failure_is_downstream_error(settings):
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DownstreamHttpError, match="API request failed"):
        asyncio.run(fetch_sample(settings, transport=httpx.MockTransport(boom)))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {}},
        {"json": []},
        {"json": {"data": [1]}},
        {"json": ["12"]},
        {"json": [True]},
        {"json": [None, 1]},
        {"text": "<html>oops</html>"},
        {"content": b"[" + b"9" * 400 + b"]"},
    ],
)
def test_malformed_payloads(settings, downstream, kwargs):
    downstream.queue(200, **kwargs)
    with pytest.raises(MalformedDownstreamPayload):
        _fetch(settings, downstream)


def test_parse_sample_takes_first_element():
    assert parse_sample([7, 8, 9]) == 7
    assert parse_sample([0]) == 0
