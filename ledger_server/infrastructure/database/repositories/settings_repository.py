"""SQLAlchemy implementation of the key/value settings table."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.db.models import Setting


class SqlSettingsRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, key: str) -> str | None:
        result = await self.session.execute(select(Setting.value).where(Setting.key == key))
        return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        setting = await self.session.get(Setting, key, with_for_update=True)
        if setting is None:
            self.session.add(Setting(key=key, value=value))
        else:
            setting.value = value
        await self.session.flush()
