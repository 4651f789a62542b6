"""Withdrawal lifecycle: request -> pending -> approved | rejected."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_server.core.errors import (
    FrozenAccountError,
    InsufficientFundsError,
    InvalidStateError,
    NotFoundError,
    PolicyViolationError,
    UpstreamUnavailableError,
    ValidationError,
)
from ledger_server.infrastructure.database.repositories.withdrawal_repository import SqlWithdrawalRepository
from ledger_server.infrastructure.database.unit_of_work import UnitOfWork
from ledger_server.modules.accounts.models import Account
from ledger_server.modules.accounts.service import require_admin
from ledger_server.modules.ledger.models import TransactionKind
from ledger_server.modules.ledger.service import AccountLedger, require_positive_amount
from ledger_server.modules.rates import RateCache
from ledger_server.modules.settings import MIN_WITHDRAWAL_REFERENCE_VALUE, SettingsService

from .models import Withdrawal, WithdrawalStatus

logger = logging.getLogger(__name__)

# Estimated values are kept to this many decimal places.
VALUE_PRECISION = 8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WithdrawalService:
    def __init__(
        self,
        uow: UnitOfWork,
        rate_cache: RateCache,
        settings: SettingsService,
        *,
        allow_when_rate_unknown: bool = True,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow = uow
        self._rate_cache = rate_cache
        self._settings = settings
        self._allow_when_rate_unknown = allow_when_rate_unknown
        self._now = now

    async def request(self, account_id: str, amount: int, destination: str) -> Withdrawal:
        require_positive_amount(amount)
        if not isinstance(destination, str) or not destination.strip():
            raise ValidationError("destination must not be empty", field="destination")
        destination = destination.strip()

        # Fetched before the transaction opens so no network I/O happens under row locks.
        rate = await self._rate_cache.get_current_rate()

        async def _work(session: AsyncSession) -> Withdrawal:
            ledger = AccountLedger.with_session(session)
            account = await ledger.load(account_id)
            ledger.ensure_can_debit(account, amount)
            floor = await self._settings.store(session).get(MIN_WITHDRAWAL_REFERENCE_VALUE)
            estimated = self._evaluate_policy(amount, rate, floor)
            return await SqlWithdrawalRepository(session).create(
                account_id=account_id,
                amount=amount,
                destination=destination,
                estimated_reference_value=estimated,
            )

        withdrawal = await self._uow.run(_work, operation="request_withdrawal")
        logger.info(
            "Withdrawal %s requested by %s: %d units to %s (estimated value %s)",
            withdrawal.id,
            account_id,
            amount,
            destination,
            withdrawal.estimated_reference_value,
        )
        return withdrawal

    async def approve(
        self,
        withdrawal_id: str,
        administrator: Account,
        note: str | None = None,
        external_reference: str | None = None,
    ) -> Withdrawal:
        require_admin(administrator)

        async def _work(session: AsyncSession) -> Withdrawal:
            withdrawals = SqlWithdrawalRepository(session)
            withdrawal = await self._load_pending(withdrawals, withdrawal_id)

            annotation: dict[str, Any] = {
                "withdrawal_id": withdrawal.id,
                "destination": withdrawal.destination,
                "administrator": administrator.id,
            }
            if external_reference:
                annotation["external_reference"] = external_reference
            try:
                await AccountLedger.with_session(session).debit(
                    withdrawal.account_id,
                    withdrawal.amount,
                    kind=TransactionKind.WITHDRAWAL,
                    annotation=annotation,
                )
            except (FrozenAccountError, InsufficientFundsError):
                # a concurrent approval of this withdrawal may have drained the funds first
                conflict = await self._processed_meanwhile(withdrawals, withdrawal.id)
                if conflict is not None:
                    raise conflict from None
                raise

            approved = await withdrawals.mark_processed(
                withdrawal.id,
                status=WithdrawalStatus.APPROVED,
                processed_at=self._now(),
                processed_by=administrator.id,
                note=note,
                external_reference=external_reference,
            )
            if approved is None:
                conflict = await self._processed_meanwhile(withdrawals, withdrawal.id)
                raise conflict or InvalidStateError(withdrawal.id, "processed")
            return approved

        withdrawal = await self._uow.run(_work, operation="approve_withdrawal")
        logger.info("Withdrawal %s approved by %s", withdrawal.id, administrator.id)
        return withdrawal

    async def reject(self, withdrawal_id: str, administrator: Account, note: str | None = None) -> Withdrawal:
        require_admin(administrator)

        async def _work(session: AsyncSession) -> Withdrawal:
            withdrawals = SqlWithdrawalRepository(session)
            await self._load_pending(withdrawals, withdrawal_id)
            rejected = await withdrawals.mark_processed(
                withdrawal_id,
                status=WithdrawalStatus.REJECTED,
                processed_at=self._now(),
                processed_by=administrator.id,
                note=note,
            )
            if rejected is None:
                conflict = await self._processed_meanwhile(withdrawals, withdrawal_id)
                raise conflict or InvalidStateError(withdrawal_id, "processed")
            return rejected

        withdrawal = await self._uow.run(_work, operation="reject_withdrawal")
        logger.info("Withdrawal %s rejected by %s", withdrawal.id, administrator.id)
        return withdrawal

    async def get(self, withdrawal_id: str) -> Withdrawal:
        withdrawal = await self._uow.run(
            lambda session: SqlWithdrawalRepository(session).get(withdrawal_id),
            operation="get_withdrawal",
        )
        if withdrawal is None:
            raise NotFoundError("withdrawal", withdrawal_id)
        return withdrawal

    async def list_for_account(self, account_id: str, limit: int = 50, offset: int = 0) -> list[Withdrawal]:
        rows = await self._uow.run(
            lambda session: SqlWithdrawalRepository(session).list_for_account(account_id, limit, offset),
            operation="list_withdrawals",
        )
        return list(rows)

    async def list_pending(self, limit: int = 100, offset: int = 0) -> list[Withdrawal]:
        rows = await self._uow.run(
            lambda session: SqlWithdrawalRepository(session).list_by_status(WithdrawalStatus.PENDING, limit, offset),
            operation="list_pending_withdrawals",
        )
        return list(rows)

    def _evaluate_policy(self, amount: int, rate: float | None, floor: float) -> float | None:
        if rate is None:
            if not self._allow_when_rate_unknown:
                raise UpstreamUnavailableError("reference rate unavailable; withdrawal policy cannot be evaluated")
            logger.warning("Reference rate unknown; minimum withdrawal check skipped for %d units", amount)
            return None

        estimated = round(amount * rate, VALUE_PRECISION)
        if estimated < floor:
            raise PolicyViolationError(estimated, floor)
        return estimated

    @staticmethod
    async def _load_pending(withdrawals: SqlWithdrawalRepository, withdrawal_id: str) -> Withdrawal:
        withdrawal = await withdrawals.get(withdrawal_id, for_update=True)
        if withdrawal is None:
            raise NotFoundError("withdrawal", withdrawal_id)
        if withdrawal.status is not WithdrawalStatus.PENDING:
            raise InvalidStateError(withdrawal_id, withdrawal.status.value)
        return withdrawal

    @staticmethod
    async def _processed_meanwhile(
        withdrawals: SqlWithdrawalRepository, withdrawal_id: str
    ) -> InvalidStateError | None:
        current = await withdrawals.get(withdrawal_id, for_update=True)
        if current is None or current.status is WithdrawalStatus.PENDING:
            return None
        return InvalidStateError(withdrawal_id, current.status.value)
