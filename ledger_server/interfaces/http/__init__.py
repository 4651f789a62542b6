from fastapi import APIRouter

from ledger_server.interfaces.http.routers import account, admin, auth, rates


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(account.router, prefix="/account", tags=["account"])
    router.include_router(rates.router, prefix="/rates", tags=["rates"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    return router


__all__ = [
    "create_api_router",
]
