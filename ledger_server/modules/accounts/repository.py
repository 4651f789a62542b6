"""Repository protocol for accounts."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import Account


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence."""

    async def get_by_id(self, account_id: str, *, for_update: bool = False) -> Account | None:
        ...

    async def get_by_username(self, username: str) -> Account | None:
        ...

    async def lock_many(self, account_ids: Sequence[str]) -> dict[str, Account]:
        ...

    async def list_accounts(self) -> Sequence[Account]:
        ...

    async def create_account(self, *, username: str, password_hash: str, role: str) -> Account:
        ...

    async def apply_delta(self, account_id: str, delta: int, *, allow_frozen: bool = False) -> Account | None:
        ...

    async def set_frozen(self, account_id: str, frozen: bool) -> Account | None:
        ...
