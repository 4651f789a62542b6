"""Registration and login."""
from fastapi import APIRouter, Depends, status

from ledger_server.core.errors import AuthenticationError
from ledger_server.core.security import create_access_token
from ledger_server.interfaces.http.deps import get_account_service
from ledger_server.modules.accounts.models import Account, AccountCreateInput
from ledger_server.modules.accounts.service import AccountService
from ledger_server.schemas import AccountResponse, LoginRequest, LoginResponse, RegisterRequest

router = APIRouter()


def _login_response(account: Account) -> LoginResponse:
    return LoginResponse(
        access_token=create_access_token(account.id, account.username, account.role),
        account_id=account.id,
        username=account.username,
        role=account.role,
    )


@router.post(
    "/register",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an account",
)
async def register(
    payload: RegisterRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.create_account(
        AccountCreateInput(username=payload.username, password=payload.password, role="user")
    )
    return AccountResponse.model_validate(account)


@router.post("/login", response_model=LoginResponse, summary="Exchange credentials for a bearer token")
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    account = await account_service.authenticate(payload.username, payload.password)
    if account is None:
        raise AuthenticationError("invalid username or password")
    return _login_response(account)
