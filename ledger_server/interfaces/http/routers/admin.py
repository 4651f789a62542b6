"""Administrative endpoints: withdrawal review, balance moves, freezes and policy."""
from typing import List

from fastapi import APIRouter, Depends, Query

from ledger_server.core.container import ApplicationContainer, get_container
from ledger_server.interfaces.http.deps import (
    get_account_service,
    get_current_admin,
    get_ledger_service,
    get_settings_service,
    get_transfer_service,
    get_withdrawal_service,
)
from ledger_server.modules.accounts.models import Account
from ledger_server.modules.accounts.service import AccountService
from ledger_server.modules.ledger.service import LedgerService
from ledger_server.modules.settings import SettingsService
from ledger_server.modules.transfers.service import TransferService
from ledger_server.modules.withdrawals.service import WithdrawalService
from ledger_server.schemas import (
    AccountResponse,
    BalanceAdjustRequest,
    MinWithdrawalRequest,
    MinWithdrawalResponse,
    PostingResponse,
    TransactionListResponse,
    TransactionResponse,
    TransferRequest,
    TransferResponse,
    WithdrawalApproveRequest,
    WithdrawalListResponse,
    WithdrawalRejectRequest,
    WithdrawalResponse,
)

router = APIRouter()


@router.get("/me", response_model=AccountResponse)
async def current_admin(admin: Account = Depends(get_current_admin)) -> AccountResponse:
    return AccountResponse.model_validate(admin)


@router.get("/accounts", response_model=List[AccountResponse])
async def list_accounts(
    _: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    accounts = await account_service.list_accounts()
    return [AccountResponse.model_validate(account) for account in accounts]


@router.get("/accounts/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: str,
    _: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.model_validate(await account_service.get_account(account_id))


@router.get("/accounts/{account_id}/transactions", response_model=TransactionListResponse)
async def list_account_transactions(
    account_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: Account = Depends(get_current_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    records = await ledger.list_transactions(account_id, limit, offset)
    return TransactionListResponse(transactions=[TransactionResponse.model_validate(record) for record in records])


@router.post("/accounts/{account_id}/freeze", response_model=AccountResponse)
async def freeze_account(
    account_id: str,
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.set_frozen(account_id, True, actor_id=admin.id)
    return AccountResponse.model_validate(account)


@router.post("/accounts/{account_id}/unfreeze", response_model=AccountResponse)
async def unfreeze_account(
    account_id: str,
    admin: Account = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.set_frozen(account_id, False, actor_id=admin.id)
    return AccountResponse.model_validate(account)


@router.post("/accounts/{account_id}/adjust", response_model=PostingResponse)
async def adjust_balance(
    account_id: str,
    payload: BalanceAdjustRequest,
    admin: Account = Depends(get_current_admin),
    transfers: TransferService = Depends(get_transfer_service),
) -> PostingResponse:
    posting = await transfers.adjust(account_id, payload.amount, admin, reason=payload.reason)
    return PostingResponse.model_validate(posting)


@router.post("/transfers", response_model=TransferResponse)
async def transfer(
    payload: TransferRequest,
    admin: Account = Depends(get_current_admin),
    transfers: TransferService = Depends(get_transfer_service),
) -> TransferResponse:
    result = await transfers.transfer(
        payload.from_account_id,
        payload.to_account_id,
        payload.amount,
        admin,
        reason=payload.reason,
    )
    return TransferResponse.model_validate(result)


@router.get("/withdrawals/pending", response_model=WithdrawalListResponse)
async def list_pending_withdrawals(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: Account = Depends(get_current_admin),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalListResponse:
    rows = await withdrawals.list_pending(limit, offset)
    return WithdrawalListResponse(withdrawals=[WithdrawalResponse.model_validate(row) for row in rows])


@router.post("/withdrawals/{withdrawal_id}/approve", response_model=WithdrawalResponse)
async def approve_withdrawal(
    withdrawal_id: str,
    payload: WithdrawalApproveRequest,
    admin: Account = Depends(get_current_admin),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalResponse:
    withdrawal = await withdrawals.approve(
        withdrawal_id,
        admin,
        note=payload.note,
        external_reference=payload.external_reference,
    )
    return WithdrawalResponse.model_validate(withdrawal)


@router.post("/withdrawals/{withdrawal_id}/reject", response_model=WithdrawalResponse)
async def reject_withdrawal(
    withdrawal_id: str,
    payload: WithdrawalRejectRequest,
    admin: Account = Depends(get_current_admin),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalResponse:
    withdrawal = await withdrawals.reject(withdrawal_id, admin, note=payload.note)
    return WithdrawalResponse.model_validate(withdrawal)


@router.get("/settings/min-withdrawal", response_model=MinWithdrawalResponse)
async def get_min_withdrawal(
    _: Account = Depends(get_current_admin),
    policy: SettingsService = Depends(get_settings_service),
    container: ApplicationContainer = Depends(get_container),
) -> MinWithdrawalResponse:
    value = await policy.get_min_withdrawal()
    return MinWithdrawalResponse(value=value, currency=container.settings.pricing.vs_currency)


@router.put("/settings/min-withdrawal", response_model=MinWithdrawalResponse)
async def set_min_withdrawal(
    payload: MinWithdrawalRequest,
    admin: Account = Depends(get_current_admin),
    policy: SettingsService = Depends(get_settings_service),
    container: ApplicationContainer = Depends(get_container),
) -> MinWithdrawalResponse:
    value = await policy.set_min_withdrawal(payload.value, actor_id=admin.id)
    return MinWithdrawalResponse(value=value, currency=container.settings.pricing.vs_currency)
