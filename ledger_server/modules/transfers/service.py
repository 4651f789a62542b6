"""Administrator balance moves: direct adjustment and account-to-account transfer."""

from __future__ import annotations

import logging

from ledger_server.infrastructure.database.unit_of_work import UnitOfWork
from ledger_server.modules.accounts.models import Account
from ledger_server.modules.accounts.service import require_admin
from ledger_server.modules.ledger.models import Posting, TransferResult
from ledger_server.modules.ledger.service import AccountLedger

logger = logging.getLogger(__name__)


class TransferService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def adjust(
        self,
        account_id: str,
        signed_amount: int,
        actor: Account,
        reason: str | None = None,
    ) -> Posting:
        require_admin(actor)
        annotation = {"actor": actor.id}
        if reason:
            annotation["reason"] = reason

        posting = await self._uow.run(
            lambda session: AccountLedger.with_session(session).adjust(
                account_id,
                signed_amount,
                annotation=annotation,
            ),
            operation="admin_adjust",
        )
        logger.info("Balance of %s adjusted by %+d by %s", account_id, signed_amount, actor.id)
        return posting

    async def transfer(
        self,
        source_id: str,
        destination_id: str,
        amount: int,
        actor: Account,
        reason: str | None = None,
    ) -> TransferResult:
        require_admin(actor)
        annotation = {"actor": actor.id}
        if reason:
            annotation["reason"] = reason

        result = await self._uow.run(
            lambda session: AccountLedger.with_session(session).transfer(
                source_id,
                destination_id,
                amount,
                annotation=annotation,
            ),
            operation="admin_transfer",
        )
        logger.info("Transferred %d from %s to %s by %s", amount, source_id, destination_id, actor.id)
        return result
