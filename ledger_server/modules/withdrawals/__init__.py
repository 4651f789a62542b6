"""Withdrawal domain models. The engine lives in :mod:`.service`."""

from .models import Withdrawal, WithdrawalStatus

__all__ = ["Withdrawal", "WithdrawalStatus"]
