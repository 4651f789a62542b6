"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ADMIN_ROLES = frozenset({"admin"})


@dataclass(slots=True)
class Account:
    id: str
    username: str
    role: str
    balance: int
    is_frozen: bool
    password_hash: str = field(repr=False, default="")
    created_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    password: str
    role: str = "user"
