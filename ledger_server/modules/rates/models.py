"""Rate cache entry."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RateSnapshot:
    value: float
    fetched_at: float
