"""Process-wide token rate cache; a failed refresh serves the last known value."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

from ledger_server.core.errors import UpstreamUnavailableError

from .models import RateSnapshot

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[float]]
Clock = Callable[[], float]


class RateCache:
    def __init__(
        self,
        fetcher: Fetcher,
        ttl_seconds: float,
        *,
        clock: Clock = time.monotonic,
        fetch_timeout: float | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._fetcher = fetcher
        self._ttl = ttl_seconds
        self._clock = clock
        self._fetch_timeout = fetch_timeout
        self._entry: RateSnapshot | None = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def snapshot(self) -> RateSnapshot | None:
        return self._entry

    def age(self) -> float | None:
        entry = self._entry
        if entry is None:
            return None
        return self._clock() - entry.fetched_at

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age < self._ttl

    async def get_current_rate(self) -> float | None:
        entry = self._entry
        if entry is not None and self._clock() - entry.fetched_at < self._ttl:
            return entry.value

        try:
            value = await self._fetch()
        except UpstreamUnavailableError as exc:
            if entry is None:
                logger.warning("Rate unavailable and nothing cached: %s", exc.message)
                return None
            logger.warning(
                "Rate refresh failed (%s); serving value %s from %.1fs ago",
                exc.message,
                entry.value,
                self._clock() - entry.fetched_at,
            )
            return entry.value

        self._entry = RateSnapshot(value=value, fetched_at=self._clock())
        logger.info("Rate refreshed: %s", value)
        return value

    def reset(self) -> None:
        self._entry = None

    async def _fetch(self) -> float:
        try:
            if self._fetch_timeout is None:
                return await self._fetcher()
            return await asyncio.wait_for(self._fetcher(), timeout=self._fetch_timeout)
        except UpstreamUnavailableError:
            raise
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError(f"rate fetch timed out after {self._fetch_timeout}s") from exc
        except Exception as exc:
            # any fetcher fault is a failed refresh, never a caller error
            raise UpstreamUnavailableError(f"rate fetch failed: {exc!r}") from exc


__all__ = ["RateCache"]
