"""SQLAlchemy implementation of the append-only transaction log."""

from __future__ import annotations

import json
from typing import Any, Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.db.models import TransactionRecord as TransactionModel
from ledger_server.modules.ledger.models import TransactionKind, TransactionRecord
from ledger_server.modules.ledger.repository import TransactionRepository


class SqlTransactionRepository(TransactionRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(
        self,
        *,
        account_id: str,
        kind: TransactionKind,
        amount: int,
        annotation: dict[str, Any] | None,
    ) -> TransactionRecord:
        record = TransactionModel(
            account_id=account_id,
            kind=kind.value,
            amount=amount,
            annotation=json.dumps(annotation, sort_keys=True) if annotation else None,
        )
        self.session.add(record)
        await self.session.flush()
        return self._to_domain(record)

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[TransactionRecord]:
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.account_id == account_id)
            .order_by(desc(TransactionModel.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()]

    @staticmethod
    def _to_domain(model: TransactionModel) -> TransactionRecord:
        return TransactionRecord(
            id=model.id,
            account_id=model.account_id,
            kind=TransactionKind(model.kind),
            amount=model.amount,
            annotation=json.loads(model.annotation) if model.annotation else {},
            created_at=model.created_at,
        )
