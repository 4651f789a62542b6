import httpx
import pytest

from ledger_server.core.errors import UpstreamUnavailableError
from ledger_server.infrastructure.pricing import PriceClient
from ledger_server.modules.rates import RateCache

URL = "https://prices.test/simple/price"


def _client(handler) -> PriceClient:
    return PriceClient(URL, "tether", "usd", transport=httpx.MockTransport(handler))


async def test_fetch_price_reads_token_and_currency():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"tether": {"usd": 0.9996}})

    client = _client(handler)
    try:
        assert await client.fetch_price() == 0.9996
    finally:
        await client.close()
    assert seen == {"ids": "tether", "vs_currencies": "usd"}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(429, text="slow down"),
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json={}),
        httpx.Response(200, json={"tether": {"eur": 0.92}}),
        httpx.Response(200, json={"tether": None}),
        httpx.Response(200, json={"tether": {"usd": "1.0"}}),
        httpx.Response(200, json={"tether": {"usd": True}}),
        httpx.Response(200, json={"tether": {"usd": 0}}),
        httpx.Response(200, json={"tether": {"usd": -1.2}}),
    ],
)
async def test_malformed_or_failed_responses(response):
    client = _client(lambda request: response)
    try:
        with pytest.raises(UpstreamUnavailableError):
            await client.fetch_price()
    finally:
        await client.close()


async def test_transport_error_is_upstream_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(UpstreamUnavailableError) as excinfo:
            await client.fetch_price()
    finally:
        await client.close()
    assert excinfo.value.details == {"source": "price"}


async def test_malformed_url_is_upstream_failure():
    client = PriceClient("http://exa mple.com/\x00", "tether", "usd")
    try:
        with pytest.raises(UpstreamUnavailableError):
            await client.fetch_price()
        cache = RateCache(client.fetch_price, 60.0)
        assert await cache.get_current_rate() is None
    finally:
        await client.close()
