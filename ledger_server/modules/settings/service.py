"""Policy parameters stored as key/value rows."""

from __future__ import annotations

import logging
import math
from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.core.errors import ValidationError
from ledger_server.infrastructure.database.repositories.settings_repository import SqlSettingsRepository
from ledger_server.infrastructure.database.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

MIN_WITHDRAWAL_REFERENCE_VALUE = "min_withdrawal_reference_value"


class SettingsStore:
    """Reads fall back to ``defaults`` when a key was never written."""

    def __init__(self, session: AsyncSession, defaults: Mapping[str, float]) -> None:
        self._repository = SqlSettingsRepository(session)
        self._defaults = defaults

    async def get(self, key: str) -> float:
        raw = await self._repository.get(key)
        if raw is None:
            return float(self._defaults[key])
        return float(raw)

    async def set(self, key: str, value: float) -> None:
        await self._repository.set(key, repr(float(value)))


class SettingsService:
    def __init__(self, uow: UnitOfWork, defaults: Mapping[str, float]) -> None:
        self._uow = uow
        self._defaults = dict(defaults)

    def store(self, session: AsyncSession) -> SettingsStore:
        return SettingsStore(session, self._defaults)

    async def get_min_withdrawal(self) -> float:
        return await self._uow.run(
            lambda session: self.store(session).get(MIN_WITHDRAWAL_REFERENCE_VALUE),
            operation="get_min_withdrawal",
        )

    async def set_min_withdrawal(self, value: float, *, actor_id: str) -> float:
        try:
            value = float(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError("minimum withdrawal value must be a number", field="value") from exc
        if not math.isfinite(value) or value < 0:
            raise ValidationError("minimum withdrawal value must be a finite number >= 0", field="value")

        await self._uow.run(
            lambda session: self.store(session).set(MIN_WITHDRAWAL_REFERENCE_VALUE, value),
            operation="set_min_withdrawal",
        )
        logger.info("Minimum withdrawal value set to %s by %s", value, actor_id)
        return value
