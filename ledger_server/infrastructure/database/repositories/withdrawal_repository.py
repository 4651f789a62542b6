"""SQLAlchemy implementation for withdrawal repository"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import asc, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.db.models import Withdrawal as WithdrawalModel
from ledger_server.modules.withdrawals.models import Withdrawal, WithdrawalStatus
from ledger_server.modules.withdrawals.repository import WithdrawalRepository


class SqlWithdrawalRepository(WithdrawalRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        account_id: str,
        amount: int,
        destination: str,
        estimated_reference_value: float | None,
    ) -> Withdrawal:
        model = WithdrawalModel(
            account_id=account_id,
            amount=amount,
            destination=destination,
            status=WithdrawalStatus.PENDING.value,
            estimated_reference_value=estimated_reference_value,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def get(self, withdrawal_id: str, *, for_update: bool = False) -> Withdrawal | None:
        stmt = select(WithdrawalModel).where(WithdrawalModel.id == withdrawal_id)
        if for_update:
            # locked reads must see the committed row, not the identity map copy
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

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
        # The status guard makes the terminal transition happen at most once.
        stmt = (
            update(WithdrawalModel)
            .where(WithdrawalModel.id == withdrawal_id)
            .where(WithdrawalModel.status == WithdrawalStatus.PENDING.value)
            .values(
                status=status.value,
                processed_at=processed_at,
                processed_by=processed_by,
                note=note,
                external_reference=external_reference,
            )
            .execution_options(synchronize_session="fetch")
            .returning(WithdrawalModel)
        )
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[Withdrawal]:
        stmt = (
            select(WithdrawalModel)
            .where(WithdrawalModel.account_id == account_id)
            .order_by(desc(WithdrawalModel.requested_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def list_by_status(self, status: WithdrawalStatus, limit: int, offset: int) -> Sequence[Withdrawal]:
        # Oldest first so the review queue is worked in arrival order.
        stmt = (
            select(WithdrawalModel)
            .where(WithdrawalModel.status == status.value)
            .order_by(asc(WithdrawalModel.requested_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()]

    @staticmethod
    def _to_domain(model: WithdrawalModel) -> Withdrawal:
        return Withdrawal(
            id=model.id,
            account_id=model.account_id,
            amount=model.amount,
            destination=model.destination,
            status=WithdrawalStatus(model.status),
            estimated_reference_value=model.estimated_reference_value,
            requested_at=model.requested_at,
            processed_at=model.processed_at,
            processed_by=model.processed_by,
            note=model.note,
            external_reference=model.external_reference,
        )
