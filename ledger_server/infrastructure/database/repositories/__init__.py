"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .settings_repository import SqlSettingsRepository
from .transaction_repository import SqlTransactionRepository
from .withdrawal_repository import SqlWithdrawalRepository

__all__ = [
    "SqlAccountRepository",
    "SqlSettingsRepository",
    "SqlTransactionRepository",
    "SqlWithdrawalRepository",
]
