"""Domain model for withdrawal requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

@dataclass(slots=True)
class Withdrawal:
    id: str
    account_id: str
    amount: int
    destination: str
    status: WithdrawalStatus
    estimated_reference_value: Optional[float]
    requested_at: Optional[datetime]
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    note: Optional[str] = None
    external_reference: Optional[str] = None
