"""Runs one operation in one transaction: commit on return, rollback on error."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger_server.core.errors import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Work = Callable[[AsyncSession], Awaitable[T]]


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def run(self, work: Work[T], *, operation: str = "unknown") -> T:
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    return await work(session)
            except IntegrityError as exc:
                logger.error("Integrity error during %s: %s", operation, exc)
                raise PersistenceError("integrity constraint violated", operation) from exc
            except SQLAlchemyError as exc:
                logger.error("Database error during %s: %s", operation, exc)
                raise PersistenceError("database operation failed", operation) from exc


__all__ = ["UnitOfWork"]
