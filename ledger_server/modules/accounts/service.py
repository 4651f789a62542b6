"""Domain services for account management."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.core.crypto import hash_password, verify_password
from ledger_server.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ledger_server.infrastructure.database.repositories.account_repository import SqlAccountRepository
from ledger_server.infrastructure.database.unit_of_work import UnitOfWork

from .models import Account, AccountCreateInput

logger = logging.getLogger(__name__)

ROLES = frozenset({"user", "admin"})


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._uow.run(
            lambda session: SqlAccountRepository(session).get_by_id(account_id),
            operation="get_account",
        )

    async def get_account(self, account_id: str) -> Account:
        account = await self.get_by_id(account_id)
        if account is None:
            raise NotFoundError("account", account_id)
        return account

    async def list_accounts(self) -> Sequence[Account]:
        return await self._uow.run(
            lambda session: SqlAccountRepository(session).list_accounts(),
            operation="list_accounts",
        )

    async def authenticate(self, username: str, password: str) -> Account | None:
        account = await self._uow.run(
            lambda session: SqlAccountRepository(session).get_by_username(username),
            operation="authenticate",
        )
        if account is None or not verify_password(password, account.password_hash):
            return None
        return account

    async def create_account(self, payload: AccountCreateInput) -> Account:
        if payload.role not in ROLES:
            raise ValidationError(f"unknown role: {payload.role}", field="role")
        password_hash = hash_password(payload.password)

        async def _work(session: AsyncSession) -> Account:
            repository = SqlAccountRepository(session)
            if await repository.get_by_username(payload.username) is not None:
                raise ConflictError(f"username already exists: {payload.username}", field="username")
            return await repository.create_account(
                username=payload.username,
                password_hash=password_hash,
                role=payload.role,
            )

        account = await self._uow.run(_work, operation="create_account")
        logger.info("Registered %s account %s (%s)", account.role, account.id, account.username)
        return account

    async def set_frozen(self, account_id: str, frozen: bool, *, actor_id: str) -> Account:
        account = await self._uow.run(
            lambda session: SqlAccountRepository(session).set_frozen(account_id, frozen),
            operation="set_frozen",
        )
        if account is None:
            raise NotFoundError("account", account_id)
        logger.info("Account %s %s by %s", account_id, "frozen" if frozen else "unfrozen", actor_id)
        return account


def require_admin(actor: Account) -> None:
    if not actor.is_admin():
        raise PermissionDeniedError(f"account {actor.id} is not an administrator", account_id=actor.id)
