"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger_server.core.config import Settings, get_settings
from ledger_server.infrastructure.database.session import get_session_factory
from ledger_server.infrastructure.database.unit_of_work import UnitOfWork
from ledger_server.infrastructure.pricing import PriceClient
from ledger_server.modules.accounts.service import AccountService
from ledger_server.modules.ledger.service import LedgerService
from ledger_server.modules.rates import RateCache
from ledger_server.modules.settings import MIN_WITHDRAWAL_REFERENCE_VALUE, SettingsService
from ledger_server.modules.transfers.service import TransferService
from ledger_server.modules.withdrawals.service import WithdrawalService


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    uow: UnitOfWork
    rate_cache: RateCache
    accounts: AccountService
    ledger: LedgerService
    policy: SettingsService
    withdrawals: WithdrawalService
    transfers: TransferService
    price_client: PriceClient | None = None

    @classmethod
    def build(
        cls,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        rate_cache: RateCache | None = None,
    ) -> "ApplicationContainer":
        uow = UnitOfWork(session_factory)
        price_client = None
        if rate_cache is None:
            price_client = PriceClient(
                url=settings.pricing.url,
                token_id=settings.pricing.token_id,
                vs_currency=settings.pricing.vs_currency,
                timeout=settings.pricing.timeout_seconds,
            )
            rate_cache = RateCache(
                price_client.fetch_price,
                settings.pricing.cache_ttl_seconds,
                fetch_timeout=settings.pricing.timeout_seconds * 2,
            )
        policy = SettingsService(
            uow,
            {MIN_WITHDRAWAL_REFERENCE_VALUE: settings.withdrawal.default_min_reference_value},
        )
        return cls(
            settings=settings,
            uow=uow,
            rate_cache=rate_cache,
            accounts=AccountService(uow),
            ledger=LedgerService(uow),
            policy=policy,
            withdrawals=WithdrawalService(
                uow,
                rate_cache,
                policy,
                allow_when_rate_unknown=settings.withdrawal.allow_when_rate_unknown,
            ),
            transfers=TransferService(uow),
            price_client=price_client,
        )

    async def aclose(self) -> None:
        if self.price_client is not None:
            await self.price_client.close()


@lru_cache()
def get_container() -> ApplicationContainer:
    return ApplicationContainer.build(get_settings(), get_session_factory())


__all__ = ["ApplicationContainer", "get_container"]
