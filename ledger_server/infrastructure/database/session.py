"""Async SQLAlchemy engine and session management."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ledger_server.core.config import Settings, get_settings
from ledger_server.infrastructure.database.base import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    database = settings.database
    options: dict[str, Any] = {"echo": database.echo or settings.debug}
    if database.url.startswith("sqlite"):
        # writers queue on the database lock instead of failing immediately
        options["connect_args"] = {"timeout": 30}
    else:
        if database.pool_size is not None:
            options["pool_size"] = database.pool_size
        if database.max_overflow is not None:
            options["max_overflow"] = database.max_overflow
    return create_async_engine(database.url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_engine_from_settings(get_settings())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create missing tables; deployed databases are managed through alembic."""
    from ledger_server.db import models  # noqa: F401  registers the tables on Base.metadata

    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
