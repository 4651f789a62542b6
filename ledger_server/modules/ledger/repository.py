"""Repository protocol for the transaction log."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .models import TransactionKind, TransactionRecord


class TransactionRepository(Protocol):
    async def append(
        self,
        *,
        account_id: str,
        kind: TransactionKind,
        amount: int,
        annotation: dict[str, Any] | None,
    ) -> TransactionRecord:
        ...

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[TransactionRecord]:
        ...
