"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.db.models import Account as AccountModel
from ledger_server.modules.accounts.models import Account
from ledger_server.modules.accounts.repository import AccountRepository


class SqlAccountRepository(AccountRepository):
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str, *, for_update: bool = False) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.id == account_id)
        if for_update:
            # locked reads must see the committed row, not the identity map copy
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_username(self, username: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.username == username)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def lock_many(self, account_ids: Sequence[str]) -> dict[str, Account]:
        # Locks are taken in id order so two transfers over the same pair cannot deadlock.
        stmt = (
            select(AccountModel)
            .where(AccountModel.id.in_(sorted(set(account_ids))))
            .order_by(AccountModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return {model.id: self._to_domain(model) for model in result.scalars().all()}

    async def list_accounts(self) -> Sequence[Account]:
        stmt = select(AccountModel).order_by(AccountModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def create_account(self, *, username: str, password_hash: str, role: str) -> Account:
        model = AccountModel(
            username=username,
            password_hash=password_hash,
            role=role,
            balance=0,
            is_frozen=False,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def apply_delta(self, account_id: str, delta: int, *, allow_frozen: bool = False) -> Account | None:
        """Add ``delta`` to the balance in a single conditional statement.

        Returns ``None`` when the row is missing, frozen (unless ``allow_frozen``)
        or would go negative; the caller decides which error that is.
        """
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .where(AccountModel.balance + delta >= 0)
            .values(balance=AccountModel.balance + delta)
            .execution_options(synchronize_session="fetch")
            .returning(AccountModel)
        )
        if not allow_frozen:
            stmt = stmt.where(AccountModel.is_frozen.is_(False))
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalars().first())

    async def set_frozen(self, account_id: str, frozen: bool) -> Account | None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(is_frozen=frozen)
            .execution_options(synchronize_session="fetch")
            .returning(AccountModel)
        )
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalars().first())

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            username=model.username,
            role=model.role or "user",
            balance=int(model.balance or 0),
            is_frozen=bool(model.is_frozen),
            password_hash=model.password_hash,
            created_at=model.created_at,
        )
