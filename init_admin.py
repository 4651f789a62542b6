"""
Seed the default administrator account used for the first login.
"""
import asyncio

from ledger_server.core.container import get_container
from ledger_server.infrastructure.database import init_db
from ledger_server.infrastructure.database.session import dispose_engine
from ledger_server.modules.accounts.models import AccountCreateInput


async def create_default_admin(username: str = "admin", password: str = "admin123") -> None:
    await init_db()
    container = get_container()
    try:
        await _seed(container, username, password)
    finally:
        await container.aclose()
        await dispose_engine()


async def _seed(container, username: str, password: str) -> None:
    existing = [account for account in await container.accounts.list_accounts() if account.is_admin()]
    if existing:
        print("An administrator account already exists, nothing to do")
        return

    await container.accounts.create_account(
        AccountCreateInput(username=username, password=password, role="admin")
    )

    print("=" * 50)
    print("Default administrator created")
    print("=" * 50)
    print(f"username: {username}")
    print(f"password: {password}")
    print("=" * 50)
    print("Change the password after the first login!")
    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(create_default_admin())
