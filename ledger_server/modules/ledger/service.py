"""Balance mutation primitives and the deposit use case."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.core.errors import (
    FrozenAccountError,
    InsufficientFundsError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from ledger_server.infrastructure.database.repositories.account_repository import SqlAccountRepository
from ledger_server.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository
from ledger_server.infrastructure.database.unit_of_work import UnitOfWork
from ledger_server.modules.accounts.models import Account

from .models import Posting, TransactionKind, TransactionRecord, TransferResult

logger = logging.getLogger(__name__)


def require_positive_amount(amount: Any, field: str = "amount") -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    if amount <= 0:
        raise ValidationError(f"{field} must be positive", field=field)
    return amount


class AccountLedger:
    def __init__(self, accounts: SqlAccountRepository, transactions: SqlTransactionRepository) -> None:
        self._accounts = accounts
        self._transactions = transactions

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountLedger":
        return cls(SqlAccountRepository(session), SqlTransactionRepository(session))

    async def load(self, account_id: str, *, for_update: bool = True) -> Account:
        account = await self._accounts.get_by_id(account_id, for_update=for_update)
        if account is None:
            raise NotFoundError("account", account_id)
        return account

    async def credit(
        self,
        account_id: str,
        amount: int,
        *,
        kind: TransactionKind = TransactionKind.DEPOSIT,
        annotation: dict[str, Any] | None = None,
    ) -> Posting:
        require_positive_amount(amount)
        account = await self.load(account_id)
        if account.is_frozen:
            raise FrozenAccountError(account_id)
        return await self._post(account_id, amount, kind, annotation)

    async def debit(
        self,
        account_id: str,
        amount: int,
        *,
        kind: TransactionKind,
        annotation: dict[str, Any] | None = None,
    ) -> Posting:
        require_positive_amount(amount)
        account = await self.load(account_id)
        self.ensure_can_debit(account, amount)
        return await self._post(account_id, -amount, kind, annotation)

    async def transfer(
        self,
        source_id: str,
        destination_id: str,
        amount: int,
        *,
        annotation: dict[str, Any] | None = None,
    ) -> TransferResult:
        require_positive_amount(amount)
        if source_id == destination_id:
            raise ValidationError("cannot transfer to the same account", field="to_account_id")

        # Every check runs before either leg is written.
        locked = await self._accounts.lock_many([source_id, destination_id])
        for account_id in (source_id, destination_id):
            if account_id not in locked:
                raise NotFoundError("account", account_id)
        source, destination = locked[source_id], locked[destination_id]
        if destination.is_frozen:
            raise FrozenAccountError(destination_id)
        self.ensure_can_debit(source, amount)

        extra = dict(annotation or {})
        outgoing = await self._post(
            source_id,
            -amount,
            TransactionKind.TRANSFER_OUT,
            {**extra, "counterparty": destination_id},
        )
        incoming = await self._post(
            destination_id,
            amount,
            TransactionKind.TRANSFER_IN,
            {**extra, "counterparty": source_id, "paired_record": outgoing.record.id},
        )
        return TransferResult(outgoing=outgoing, incoming=incoming)

    async def adjust(
        self,
        account_id: str,
        signed_amount: int,
        *,
        annotation: dict[str, Any] | None = None,
    ) -> Posting:
        """Administrative override: ignores the frozen flag but never drives the balance below zero."""
        if isinstance(signed_amount, bool) or not isinstance(signed_amount, int):
            raise ValidationError("amount must be an integer", field="amount")
        if signed_amount == 0:
            raise ValidationError("adjustment amount must not be zero", field="amount")
        account = await self.load(account_id)
        if account.balance + signed_amount < 0:
            raise InsufficientFundsError(account_id, account.balance, -signed_amount)
        return await self._post(
            account_id,
            signed_amount,
            TransactionKind.ADMIN_ADJUST,
            annotation,
            allow_frozen=True,
        )

    async def list_transactions(self, account_id: str, limit: int, offset: int) -> Sequence[TransactionRecord]:
        return await self._transactions.list_for_account(account_id, limit, offset)

    @staticmethod
    def ensure_can_debit(account: Account, amount: int) -> None:
        if account.is_frozen:
            raise FrozenAccountError(account.id)
        if account.balance < amount:
            raise InsufficientFundsError(account.id, account.balance, amount)

    async def _post(
        self,
        account_id: str,
        delta: int,
        kind: TransactionKind,
        annotation: dict[str, Any] | None,
        *,
        allow_frozen: bool = False,
    ) -> Posting:
        updated = await self._accounts.apply_delta(account_id, delta, allow_frozen=allow_frozen)
        if updated is None:
            raise await self._explain_rejected_write(account_id, delta)
        record = await self._transactions.append(
            account_id=account_id,
            kind=kind,
            amount=delta,
            annotation=annotation,
        )
        logger.info(
            "Posted %s %+d to account %s (balance %d, record %s)",
            kind.value,
            delta,
            account_id,
            updated.balance,
            record.id,
        )
        return Posting(record=record, balance=updated.balance)

    async def _explain_rejected_write(self, account_id: str, delta: int) -> LedgerError:
        # The row changed between the check and the conditional write.
        current = await self._accounts.get_by_id(account_id, for_update=True)
        if current is None:
            return NotFoundError("account", account_id)
        if current.is_frozen:
            return FrozenAccountError(account_id)
        return InsufficientFundsError(account_id, current.balance, -delta)


class LedgerService:
    """Use cases that touch a single account's balance outside the withdrawal flow."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def deposit(
        self,
        account_id: str,
        amount: int,
        *,
        external_reference: str | None = None,
    ) -> Posting:
        annotation = {"external_reference": external_reference} if external_reference else None
        return await self._uow.run(
            lambda session: AccountLedger.with_session(session).credit(
                account_id,
                amount,
                kind=TransactionKind.DEPOSIT,
                annotation=annotation,
            ),
            operation="deposit",
        )

    async def list_transactions(self, account_id: str, limit: int = 50, offset: int = 0) -> list[TransactionRecord]:
        async def _work(session: AsyncSession) -> list[TransactionRecord]:
            ledger = AccountLedger.with_session(session)
            await ledger.load(account_id, for_update=False)
            return list(await ledger.list_transactions(account_id, limit, offset))

        return await self._uow.run(_work, operation="list_transactions")
