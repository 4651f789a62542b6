"""Domain models for the transaction log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class TransactionKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    ADMIN_ADJUST = "admin_adjust"


@dataclass(slots=True)
class TransactionRecord:
    id: str
    account_id: str
    kind: TransactionKind
    amount: int
    annotation: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class Posting:
    """A balance change together with the log record written for it."""

    record: TransactionRecord
    balance: int


@dataclass(slots=True)
class TransferResult:
    outgoing: Posting
    incoming: Posting
