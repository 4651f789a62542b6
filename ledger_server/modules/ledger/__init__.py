"""Ledger domain models. The ledger primitives live in :mod:`.service`."""

from .models import Posting, TransactionKind, TransactionRecord, TransferResult

__all__ = ["Posting", "TransactionKind", "TransactionRecord", "TransferResult"]
