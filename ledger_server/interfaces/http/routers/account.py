"""Endpoints for the authenticated account holder: balance, deposits and withdrawals."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ledger_server.interfaces.http.deps import (
    get_current_account,
    get_ledger_service,
    get_withdrawal_service,
)
from ledger_server.modules.accounts.models import Account
from ledger_server.modules.ledger.service import LedgerService
from ledger_server.modules.withdrawals.service import WithdrawalService
from ledger_server.schemas import (
    AccountResponse,
    DepositRequest,
    PostingResponse,
    TransactionListResponse,
    TransactionResponse,
    WithdrawalCreateRequest,
    WithdrawalListResponse,
    WithdrawalResponse,
)

router = APIRouter()


@router.get("", response_model=AccountResponse, summary="Current account and balance")
async def get_account(account: Account = Depends(get_current_account)) -> AccountResponse:
    return AccountResponse.model_validate(account)


@router.post(
    "/deposits",
    response_model=PostingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Credit a deposit to the current account",
)
async def deposit(
    payload: DepositRequest,
    account: Account = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> PostingResponse:
    posting = await ledger.deposit(account.id, payload.amount, external_reference=payload.external_reference)
    return PostingResponse.model_validate(posting)


@router.get("/transactions", response_model=TransactionListResponse, summary="Transaction history")
async def list_transactions(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    account: Account = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    records = await ledger.list_transactions(account.id, limit, offset)
    return TransactionListResponse(transactions=[TransactionResponse.model_validate(record) for record in records])


@router.post(
    "/withdrawals",
    response_model=WithdrawalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a withdrawal (needs administrator approval)",
)
async def request_withdrawal(
    payload: WithdrawalCreateRequest,
    account: Account = Depends(get_current_account),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalResponse:
    withdrawal = await withdrawals.request(account.id, payload.amount, payload.destination)
    return WithdrawalResponse.model_validate(withdrawal)


@router.get("/withdrawals", response_model=WithdrawalListResponse, summary="Own withdrawal requests")
async def list_withdrawals(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    account: Account = Depends(get_current_account),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalListResponse:
    rows = await withdrawals.list_for_account(account.id, limit, offset)
    return WithdrawalListResponse(withdrawals=[WithdrawalResponse.model_validate(row) for row in rows])
