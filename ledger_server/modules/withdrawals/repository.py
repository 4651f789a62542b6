"""Repository interface for withdrawals."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import Withdrawal, WithdrawalStatus


class WithdrawalRepository(Protocol):
    async def create(
        self,
        *,
        account_id: str,
        amount: int,
        destination: str,
        estimated_reference_value: float | None,
    ) -> Withdrawal:
        ...

    async def get(self, withdrawal_id: str, *, for_update: bool = False) -> Withdrawal | None:
        ...

    async def mark_processed(
        self,
        withdrawal_id: str,
        *,
        status: WithdrawalStatus,
        processed_at: datetime,
        processed_by: str,
        note: str | None,
        external_reference: str | None = None,
    ) -> Withdrawal | None:
        ...

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[Withdrawal]:
        ...

    async def list_by_status(self, status: WithdrawalStatus, limit: int, offset: int) -> Sequence[Withdrawal]:
        ...
