"""Bearer token issuance and the caller-identity dependencies."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ledger_server.core.config import get_settings
from ledger_server.core.container import ApplicationContainer, get_container
from ledger_server.core.errors import AuthenticationError, PermissionDeniedError
from ledger_server.modules.accounts.models import Account
from ledger_server.schemas import TokenData

security = HTTPBearer(auto_error=False)


def create_access_token(account_id: str, username: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    security_settings = get_settings().security
    expire_delta = expires_delta or timedelta(minutes=security_settings.access_token_expire_minutes)
    payload = {
        "sub": account_id,
        "username": username,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, security_settings.secret_key, algorithm=security_settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    security_settings = get_settings().security
    try:
        payload = jwt.decode(token, security_settings.secret_key, algorithms=[security_settings.algorithm])
    except JWTError as exc:
        raise AuthenticationError("could not validate credentials") from exc

    account_id = payload.get("sub")
    username = payload.get("username")
    role = payload.get("role")
    if not all([account_id, username, role]):
        raise AuthenticationError("could not validate credentials")
    return TokenData(account_id=account_id, username=username, role=role)


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    container: ApplicationContainer = Depends(get_container),
) -> Account:
    if credentials is None:
        raise AuthenticationError("missing bearer token")
    token_data = decode_access_token(credentials.credentials)
    # Role is re-read from the store, not trusted from the token.
    account = await container.accounts.get_by_id(token_data.account_id)
    if account is None:
        raise AuthenticationError("account no longer exists")
    return account


async def get_current_admin(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin():
        raise PermissionDeniedError("administrator privileges required", account_id=account.id)
    return account
