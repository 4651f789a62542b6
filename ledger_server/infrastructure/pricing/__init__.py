"""Upstream price source."""

from .price_client import PriceClient

__all__ = ["PriceClient"]
