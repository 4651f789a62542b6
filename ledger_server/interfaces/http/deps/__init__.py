"""Reusable FastAPI dependencies."""

from ledger_server.core.security import get_current_account, get_current_admin

from .services import (
    get_account_service,
    get_ledger_service,
    get_settings_service,
    get_transfer_service,
    get_withdrawal_service,
)

__all__ = [
    "get_account_service",
    "get_current_account",
    "get_current_admin",
    "get_ledger_service",
    "get_settings_service",
    "get_transfer_service",
    "get_withdrawal_service",
]
