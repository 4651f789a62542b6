"""HTTP client for the upstream token price source."""

from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from ledger_server.core.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class PriceClient:
    """Fetches the token price in the reference currency.

    Args:
        url: price endpoint
        token_id: token identifier understood by the source
        vs_currency: reference currency code
        timeout: per-request timeout in seconds
        transport: optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        url: str,
        token_id: str,
        vs_currency: str = "usd",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.token_id = token_id
        self.vs_currency = vs_currency
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_price(self) -> float:
        client = await self._ensure_client()
        params = {"ids": self.token_id, "vs_currencies": self.vs_currency}
        try:
            response = await client.get(self.url, params=params)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamUnavailableError(f"price request failed: {exc!r}") from exc
        except ValueError as exc:
            raise UpstreamUnavailableError("price response is not valid JSON") from exc
        return self._extract_price(payload)

    def _extract_price(self, payload: Any) -> float:
        try:
            price = payload[self.token_id][self.vs_currency]
        except (KeyError, TypeError) as exc:
            raise UpstreamUnavailableError(
                f"price response has no {self.token_id}.{self.vs_currency} field"
            ) from exc

        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise UpstreamUnavailableError(f"price is not numeric: {price!r}")
        price = float(price)
        if not math.isfinite(price) or price <= 0:
            raise UpstreamUnavailableError(f"price is out of range: {price!r}")
        return price


__all__ = ["PriceClient"]
