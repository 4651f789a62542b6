"""Database infrastructure helpers (engine, sessions, unit of work)."""

from .base import Base
from .session import get_engine, get_session_factory, init_db
from .unit_of_work import UnitOfWork

__all__ = ["Base", "UnitOfWork", "get_engine", "get_session_factory", "init_db"]
