"""Shared fixtures: a throwaway SQLite database, a scripted price feed and an HTTP client."""

import os

# Settings are read once per process; keep tests off any real database or secret.
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///./test-ledger.db")
os.environ.setdefault("SECURITY__SECRET_KEY", "test-secret-key")

import bcrypt
import pytest
from httpx import ASGITransport, AsyncClient

from ledger_server.core.config import Settings
from ledger_server.core.container import ApplicationContainer, get_container
from ledger_server.core.errors import UpstreamUnavailableError
from ledger_server.core.security import create_access_token
from ledger_server.infrastructure.database import init_db
from ledger_server.infrastructure.database.session import build_session_factory
from ledger_server.modules.accounts.models import Account, AccountCreateInput
from ledger_server.modules.rates import RateCache
from sqlalchemy.ext.asyncio import create_async_engine

_FAST_SALT = bcrypt.gensalt(rounds=4)


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedFetcher:
    """Price source stand-in: returns ``price`` or fails while ``price`` is None."""

    def __init__(self, price: float | None = 1.0) -> None:
        self.price = price
        self.calls = 0

    async def __call__(self) -> float:
        self.calls += 1
        if self.price is None:
            raise UpstreamUnavailableError("price source is down")
        return self.price


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(bcrypt, "gensalt", lambda *args, **kwargs: _FAST_SALT)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", connect_args={"timeout": 30})
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return ScriptedFetcher()


@pytest.fixture
def rate_cache(fetcher, clock):
    return RateCache(fetcher, 60.0, clock=clock)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def container(settings, session_factory, rate_cache):
    return ApplicationContainer.build(settings, session_factory, rate_cache=rate_cache)


@pytest.fixture
def make_account(container):
    counter = {"n": 0}

    async def _make(
        username: str | None = None,
        *,
        role: str = "user",
        balance: int = 0,
        frozen: bool = False,
        password: str = "secret-pass",
    ) -> Account:
        counter["n"] += 1
        account = await container.accounts.create_account(
            AccountCreateInput(
                username=username or f"user{counter['n']}",
                password=password,
                role=role,
            )
        )
        if balance:
            await container.ledger.deposit(account.id, balance)
        if frozen:
            await container.accounts.set_frozen(account.id, True, actor_id="fixture")
        return await container.accounts.get_account(account.id)

    return _make


@pytest.fixture
async def admin(make_account):
    return await make_account("root", role="admin")


@pytest.fixture
async def client(container):
    from ledger_server.main import app

    app.dependency_overrides[get_container] = lambda: container
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


def auth_headers(account: Account) -> dict[str, str]:
    token = create_access_token(account.id, account.username, account.role)
    return {"Authorization": f"Bearer {token}"}


async def balance_of(container: ApplicationContainer, account_id: str) -> int:
    return (await container.accounts.get_account(account_id)).balance
