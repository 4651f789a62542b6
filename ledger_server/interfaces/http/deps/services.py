"""Service providers resolved from the application container."""

from fastapi import Depends

from ledger_server.core.container import ApplicationContainer, get_container
from ledger_server.modules.accounts.service import AccountService
from ledger_server.modules.ledger.service import LedgerService
from ledger_server.modules.settings import SettingsService
from ledger_server.modules.transfers.service import TransferService
from ledger_server.modules.withdrawals.service import WithdrawalService


def get_account_service(container: ApplicationContainer = Depends(get_container)) -> AccountService:
    return container.accounts


def get_ledger_service(container: ApplicationContainer = Depends(get_container)) -> LedgerService:
    return container.ledger


def get_withdrawal_service(container: ApplicationContainer = Depends(get_container)) -> WithdrawalService:
    return container.withdrawals


def get_transfer_service(container: ApplicationContainer = Depends(get_container)) -> TransferService:
    return container.transfers


def get_settings_service(container: ApplicationContainer = Depends(get_container)) -> SettingsService:
    return container.policy


__all__ = [
    "get_account_service",
    "get_ledger_service",
    "get_settings_service",
    "get_transfer_service",
    "get_withdrawal_service",
]
