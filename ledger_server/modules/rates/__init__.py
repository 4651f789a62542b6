"""Rate cache exports"""

from .cache import RateCache
from .models import RateSnapshot

__all__ = ["RateCache", "RateSnapshot"]
