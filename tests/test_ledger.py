import pytest

from conftest import balance_of
from ledger_server.core.errors import (
    FrozenAccountError,
    InsufficientFundsError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ledger_server.infrastructure.database.repositories import SqlAccountRepository
from ledger_server.modules.ledger.models import TransactionKind
from ledger_server.modules.ledger.service import AccountLedger


async def test_deposit_credits_balance_and_logs_record(container, make_account):
    account = await make_account()

    posting = await container.ledger.deposit(account.id, 250, external_reference="bank-42")

    assert posting.balance == 250
    assert posting.record.kind is TransactionKind.DEPOSIT
    assert posting.record.amount == 250
    assert posting.record.annotation == {"external_reference": "bank-42"}
    assert await balance_of(container, account.id) == 250


@pytest.mark.parametrize("amount", [0, -5, True, 1.5, "10"])
async def test_deposit_rejects_malformed_amounts(container, make_account, amount):
    account = await make_account()

    with pytest.raises(ValidationError):
        await container.ledger.deposit(account.id, amount)

    assert await balance_of(container, account.id) == 0
    assert await container.ledger.list_transactions(account.id) == []


async def test_deposit_to_unknown_account(container):
    with pytest.raises(NotFoundError) as excinfo:
        await container.ledger.deposit("missing", 10)
    assert excinfo.value.details == {"resource": "account", "id": "missing"}


async def test_deposit_to_frozen_account_is_refused(container, make_account):
    account = await make_account(balance=100, frozen=True)

    with pytest.raises(FrozenAccountError):
        await container.ledger.deposit(account.id, 50)

    assert await balance_of(container, account.id) == 100


async def test_transactions_are_listed_newest_first(container, make_account):
    account = await make_account()
    for amount in (10, 20, 30):
        await container.ledger.deposit(account.id, amount)

    records = await container.ledger.list_transactions(account.id)
    assert [record.amount for record in records] == [30, 20, 10]

    page = await container.ledger.list_transactions(account.id, limit=1, offset=1)
    assert [record.amount for record in page] == [20]


async def test_listing_transactions_of_unknown_account(container):
    with pytest.raises(NotFoundError):
        await container.ledger.list_transactions("missing")


async def test_transfer_moves_funds_with_paired_records(container, make_account, admin):
    source = await make_account(balance=500)
    destination = await make_account(balance=200)

    result = await container.transfers.transfer(source.id, destination.id, 120, admin, reason="settlement")

    assert result.outgoing.balance == 380
    assert result.incoming.balance == 320
    assert result.outgoing.record.kind is TransactionKind.TRANSFER_OUT
    assert result.outgoing.record.amount == -120
    assert result.incoming.record.kind is TransactionKind.TRANSFER_IN
    assert result.incoming.record.amount == 120
    assert result.outgoing.record.annotation == {
        "actor": admin.id,
        "counterparty": destination.id,
        "reason": "settlement",
    }
    assert result.incoming.record.annotation["counterparty"] == source.id
    assert result.incoming.record.annotation["paired_record"] == result.outgoing.record.id


async def test_transfer_to_frozen_account_changes_nothing(container, make_account, admin):
    a = await make_account(balance=950)
    b = await make_account(balance=200, frozen=True)

    with pytest.raises(FrozenAccountError):
        await container.transfers.transfer(a.id, b.id, 100, admin)

    assert await balance_of(container, a.id) == 950
    assert await balance_of(container, b.id) == 200
    assert len(await container.ledger.list_transactions(a.id)) == 1
    assert len(await container.ledger.list_transactions(b.id)) == 1


async def test_transfer_from_frozen_account_is_refused(container, make_account, admin):
    a = await make_account(balance=300, frozen=True)
    b = await make_account()

    with pytest.raises(FrozenAccountError):
        await container.transfers.transfer(a.id, b.id, 100, admin)

    assert await balance_of(container, a.id) == 300
    assert await balance_of(container, b.id) == 0


async def test_transfer_beyond_balance_has_no_effect(container, make_account, admin):
    a = await make_account(balance=50)
    b = await make_account(balance=10)

    with pytest.raises(InsufficientFundsError) as excinfo:
        await container.transfers.transfer(a.id, b.id, 51, admin)

    assert excinfo.value.details["balance"] == 50
    assert excinfo.value.details["requested"] == 51
    assert await balance_of(container, a.id) == 50
    assert await balance_of(container, b.id) == 10


async def test_transfer_to_same_account_is_invalid(container, make_account, admin):
    a = await make_account(balance=50)

    with pytest.raises(ValidationError):
        await container.transfers.transfer(a.id, a.id, 10, admin)


async def test_transfer_to_unknown_account(container, make_account, admin):
    a = await make_account(balance=50)

    with pytest.raises(NotFoundError):
        await container.transfers.transfer(a.id, "missing", 10, admin)
    assert await balance_of(container, a.id) == 50


async def test_transfers_require_an_administrator(container, make_account):
    a = await make_account(balance=50)
    b = await make_account()

    with pytest.raises(PermissionDeniedError):
        await container.transfers.transfer(a.id, b.id, 10, a)
    with pytest.raises(PermissionDeniedError):
        await container.transfers.adjust(a.id, 10, a)


async def test_balances_are_conserved_across_transfers(container, make_account, admin):
    accounts = [await make_account(balance=amount) for amount in (400, 250, 75)]
    total = sum(account.balance for account in accounts)

    moves = [(0, 1, 100), (1, 2, 300), (2, 0, 10), (0, 2, 1000), (2, 1, 5)]
    for src, dst, amount in moves:
        try:
            await container.transfers.transfer(accounts[src].id, accounts[dst].id, amount, admin)
        except InsufficientFundsError:
            pass

    balances = [await balance_of(container, account.id) for account in accounts]
    assert sum(balances) == total
    assert all(balance >= 0 for balance in balances)


async def test_adjust_overrides_frozen_flag(container, make_account, admin):
    account = await make_account(balance=100, frozen=True)

    posting = await container.transfers.adjust(account.id, -40, admin, reason="chargeback")

    assert posting.balance == 60
    assert posting.record.kind is TransactionKind.ADMIN_ADJUST
    assert posting.record.annotation == {"actor": admin.id, "reason": "chargeback"}

    posting = await container.transfers.adjust(account.id, 15, admin)
    assert posting.balance == 75


async def test_adjust_never_drives_balance_negative(container, make_account, admin):
    account = await make_account(balance=30)

    with pytest.raises(InsufficientFundsError):
        await container.transfers.adjust(account.id, -31, admin)
    with pytest.raises(ValidationError):
        await container.transfers.adjust(account.id, 0, admin)

    assert await balance_of(container, account.id) == 30


async def test_conditional_write_refuses_overdraft_and_frozen_rows(container, make_account):
    account = await make_account(balance=100)

    async def _overdraw(session):
        return await SqlAccountRepository(session).apply_delta(account.id, -150)

    assert await container.uow.run(_overdraw) is None
    assert await balance_of(container, account.id) == 100

    await container.accounts.set_frozen(account.id, True, actor_id="test")

    async def _debit(session):
        repository = SqlAccountRepository(session)
        blocked = await repository.apply_delta(account.id, -10)
        forced = await repository.apply_delta(account.id, -10, allow_frozen=True)
        return blocked, forced

    blocked, forced = await container.uow.run(_debit)
    assert blocked is None
    assert forced.balance == 90


async def test_debit_after_stale_check_is_rejected(container, make_account):
    account = await make_account(balance=100)

    async def _work(session):
        ledger = AccountLedger.with_session(session)
        loaded = await ledger.load(account.id)
        # Another writer drains the account between the check and the write.
        await SqlAccountRepository(session).apply_delta(account.id, -100)
        ledger.ensure_can_debit(loaded, 80)
        await ledger._post(account.id, -80, TransactionKind.WITHDRAWAL, None)

    with pytest.raises(InsufficientFundsError):
        await container.uow.run(_work)

    assert await balance_of(container, account.id) == 100
