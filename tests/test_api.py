from conftest import auth_headers, balance_of


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_register_login_and_read_account(client):
    response = await client.post("/api/auth/register", json={"username": "alice", "password": "wonderland"})
    assert response.status_code == 201
    assert response.json()["balance"] == 0
    assert response.json()["role"] == "user"

    response = await client.post("/api/auth/login", json={"username": "alice", "password": "wonderland"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await client.get("/api/account", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["username"] == "alice"


async def test_duplicate_username_conflicts(client, make_account):
    await make_account("bob")

    response = await client.post("/api/auth/register", json={"username": "bob", "password": "builder1"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "conflict"


async def test_bad_credentials(client, make_account):
    await make_account("carol", password="right-pass")

    response = await client.post("/api/auth/login", json={"username": "carol", "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "authentication_failed"


async def test_missing_token_is_rejected(client):
    response = await client.get("/api/account")
    assert response.status_code == 401


async def test_deposit_and_history(client, make_account):
    account = await make_account()
    headers = auth_headers(account)

    response = await client.post("/api/account/deposits", json={"amount": 300}, headers=headers)
    assert response.status_code == 201
    assert response.json()["balance"] == 300
    assert response.json()["record"]["kind"] == "deposit"

    response = await client.get("/api/account/transactions", headers=headers)
    assert [row["amount"] for row in response.json()["transactions"]] == [300]


async def test_validation_error_envelope(client, make_account):
    account = await make_account()

    response = await client.post("/api/account/deposits", json={"amount": -3}, headers=auth_headers(account))

    assert response.status_code == 422
    body = response.json()["error"]
    assert body["code"] == "validation_error"
    assert body["details"]["fields"][0]["field"] == "body.amount"


async def test_withdrawal_review_flow(client, container, make_account, admin):
    account = await make_account(balance=1000)

    response = await client.post(
        "/api/account/withdrawals",
        json={"amount": 50, "destination": "wallet-abc"},
        headers=auth_headers(account),
    )
    assert response.status_code == 201
    withdrawal = response.json()
    assert withdrawal["status"] == "pending"
    assert withdrawal["estimated_reference_value"] == 50.0

    response = await client.get("/api/admin/withdrawals/pending", headers=auth_headers(admin))
    assert [row["id"] for row in response.json()["withdrawals"]] == [withdrawal["id"]]

    response = await client.post(
        f"/api/admin/withdrawals/{withdrawal['id']}/approve",
        json={"note": "paid", "external_reference": "0xabc"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert await balance_of(container, account.id) == 950

    response = await client.post(
        f"/api/admin/withdrawals/{withdrawal['id']}/reject",
        json={},
        headers=auth_headers(admin),
    )
    assert response.status_code == 409
    assert response.json()["error"] == {
        "code": "invalid_state",
        "message": f"withdrawal {withdrawal['id']} is already approved",
        "details": {"id": withdrawal["id"], "status": "approved"},
    }


async def test_policy_violation_carries_value_and_floor(client, make_account, admin):
    account = await make_account(balance=1000)
    response = await client.put(
        "/api/admin/settings/min-withdrawal",
        json={"value": 60},
        headers=auth_headers(admin),
    )
    assert response.json() == {"value": 60.0, "currency": "usd"}

    response = await client.post(
        "/api/account/withdrawals",
        json={"amount": 50, "destination": "wallet"},
        headers=auth_headers(account),
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "policy_violation"
    assert response.json()["error"]["details"] == {"value": 50.0, "floor": 60.0}


async def test_admin_routes_need_admin(client, make_account):
    account = await make_account()

    response = await client.get("/api/admin/accounts", headers=auth_headers(account))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "permission_denied"


async def test_freeze_blocks_deposit_over_http(client, make_account, admin):
    account = await make_account(balance=10)

    response = await client.post(f"/api/admin/accounts/{account.id}/freeze", headers=auth_headers(admin))
    assert response.json()["is_frozen"] is True

    response = await client.post("/api/account/deposits", json={"amount": 5}, headers=auth_headers(account))
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "account_frozen"

    response = await client.post(
        f"/api/admin/accounts/{account.id}/adjust",
        json={"amount": 5, "reason": "goodwill"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["balance"] == 15


async def test_admin_transfer(client, container, make_account, admin):
    a = await make_account(balance=100)
    b = await make_account()

    response = await client.post(
        "/api/admin/transfers",
        json={"from_account_id": a.id, "to_account_id": b.id, "amount": 40},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["outgoing"]["balance"] == 60
    assert response.json()["incoming"]["balance"] == 40
    assert await balance_of(container, b.id) == 40


async def test_current_rate(client):
    response = await client.get("/api/rates/current")
    assert response.status_code == 200
    assert response.json()["rate"] == 1.0
    assert response.json()["fresh"] is True


async def test_current_rate_unknown(client, fetcher):
    fetcher.price = None

    response = await client.get("/api/rates/current")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "upstream_unavailable"
