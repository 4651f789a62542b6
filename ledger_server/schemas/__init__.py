"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ledger_server.modules.ledger.models import TransactionKind
from ledger_server.modules.withdrawals.models import WithdrawalStatus


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=72)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: str
    username: str
    role: str


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


class AccountResponse(BaseModel):
    id: str
    username: str
    role: str
    balance: int
    is_frozen: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    id: str
    account_id: str
    kind: TransactionKind
    amount: int
    annotation: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse] = Field(default_factory=list)


class PostingResponse(BaseModel):
    record: TransactionResponse
    balance: int

    model_config = ConfigDict(from_attributes=True)


class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0)
    external_reference: Optional[str] = Field(default=None, max_length=255)


class WithdrawalCreateRequest(BaseModel):
    amount: int = Field(..., gt=0)
    destination: str = Field(..., min_length=1, max_length=255)


class WithdrawalResponse(BaseModel):
    id: str
    account_id: str
    amount: int
    destination: str
    status: WithdrawalStatus
    estimated_reference_value: Optional[float] = None
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    note: Optional[str] = None
    external_reference: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WithdrawalListResponse(BaseModel):
    withdrawals: list[WithdrawalResponse] = Field(default_factory=list)


class WithdrawalApproveRequest(BaseModel):
    note: Optional[str] = None
    external_reference: Optional[str] = Field(default=None, max_length=255)


class WithdrawalRejectRequest(BaseModel):
    note: Optional[str] = None


class BalanceAdjustRequest(BaseModel):
    amount: int = Field(..., description="Signed amount; negative values debit the account")
    reason: Optional[str] = None


class TransferRequest(BaseModel):
    from_account_id: str
    to_account_id: str
    amount: int = Field(..., gt=0)
    reason: Optional[str] = None


class TransferResponse(BaseModel):
    outgoing: PostingResponse
    incoming: PostingResponse

    model_config = ConfigDict(from_attributes=True)


class MinWithdrawalRequest(BaseModel):
    value: float = Field(..., ge=0, allow_inf_nan=False)


class MinWithdrawalResponse(BaseModel):
    value: float
    currency: str


class RateResponse(BaseModel):
    token: str
    currency: str
    rate: float
    age_seconds: Optional[float] = None
    fresh: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
