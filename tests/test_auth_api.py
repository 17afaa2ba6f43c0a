"""Auth API tests — register, login, logout.

Learn: Tests cover:
1. Registration defaults + duplicate prevention (which field collided)
2. Input validation → 400 with the first violated rule
3. Login by handle or phone → token whose claims decode to the account
4. Login failures: not found / wrong password (400) vs disabled (403)
5. Logout behind the gate
"""

import uuid

import bcrypt
import pytest
from sqlalchemy import select, update

from rentdesk.auth.password import BCRYPT_ROUNDS
from rentdesk.db.models import Account

REGISTER = {
    "handle": "alice99",
    "password": "secret1",
    "phone": "13800000001",
    "confirmPassword": "secret1",
}


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_defaults(client):
    r = await client.post("/api/auth/register", json=REGISTER)
    assert r.status_code == 200
    body = r.json()
    assert body["code"] == 200
    account = body["result"]
    assert account["handle"] == "alice99"
    assert account["phone"] == "13800000001"
    assert account["role"] == "user"
    assert account["status"] == "normal"
    assert account["trustScore"] == 600
    assert uuid.UUID(account["accountId"])
    assert "password" not in account
    assert "passwordHash" not in account


@pytest.mark.asyncio
async def test_register_optional_profile_fields(client):
    r = await client.post(
        "/api/auth/register",
        json={
            **REGISTER,
            "displayName": "Alice",
            "gender": "female",
            "birthday": "1990-01-01",
        },
    )
    assert r.status_code == 200
    account = r.json()["result"]
    assert account["displayName"] == "Alice"
    assert account["gender"] == "female"
    assert account["birthday"] == "1990-01-01"


@pytest.mark.asyncio
async def test_register_trims_handle(client):
    r = await client.post("/api/auth/register", json={**REGISTER, "handle": "  alice99  "})
    assert r.status_code == 200
    assert r.json()["result"]["handle"] == "alice99"


@pytest.mark.asyncio
async def test_register_duplicate_handle_names_handle(client, alice):
    r = await client.post(
        "/api/auth/register", json={**REGISTER, "phone": "13800000002"}
    )
    assert r.status_code == 400
    assert r.json() == {"code": 400, "message": "Handle already exists", "result": None}


@pytest.mark.asyncio
async def test_register_duplicate_phone_names_phone(client, alice):
    r = await client.post("/api/auth/register", json={**REGISTER, "handle": "bob123"})
    assert r.status_code == 400
    assert r.json()["message"] == "Phone number already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"handle": "ab"}, "handle: String should have at least 3 characters"),
        ({"handle": "a" * 16}, "handle: String should have at most 15 characters"),
        ({"phone": "12800000001"}, "Invalid phone number"),
        ({"phone": "1380000000"}, "Invalid phone number"),
        ({"password": "12345", "confirmPassword": "12345"},
         "password: String should have at least 6 characters"),
        ({"confirmPassword": "secret2"}, "Passwords do not match"),
        ({"birthday": "1990-13-40"}, "Birthday must be a YYYY-MM-DD date"),
    ],
)
async def test_register_validation(client, overrides, message):
    r = await client.post("/api/auth/register", json={**REGISTER, **overrides})
    assert r.status_code == 400
    assert r.json()["code"] == 400
    assert r.json()["message"] == message


@pytest.mark.asyncio
async def test_register_missing_field(client):
    body = {k: v for k, v in REGISTER.items() if k != "phone"}
    r = await client.post("/api/auth/register", json=body)
    assert r.status_code == 400
    assert r.json()["message"] == "phone: Field required"


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("identifier", ["alice99", "13800000001"])
async def test_login_by_handle_or_phone(client, alice, token_service, identifier):
    r = await client.post(
        "/api/auth/login", json={"account": identifier, "password": "secret1"}
    )
    assert r.status_code == 200
    result = r.json()["result"]
    assert result["tokenType"] == "Bearer"
    assert result["account"]["handle"] == "alice99"
    assert "password" not in result["account"]

    claims = token_service.verify(result["token"])
    assert str(claims.account_id) == alice["accountId"]
    assert claims.role == "user"


@pytest.mark.asyncio
async def test_login_unknown_account(client):
    r = await client.post(
        "/api/auth/login", json={"account": "nobody", "password": "secret1"}
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Account not found"


@pytest.mark.asyncio
async def test_login_wrong_password(client, alice):
    r = await client.post(
        "/api/auth/login", json={"account": "alice99", "password": "secret2"}
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Wrong password"


@pytest.mark.asyncio
async def test_login_disabled_account_is_403_even_with_right_password(
    client, alice, db_session
):
    await db_session.execute(
        update(Account).where(Account.handle == "alice99").values(status="disabled")
    )
    await db_session.commit()

    right = await client.post(
        "/api/auth/login", json={"account": "alice99", "password": "secret1"}
    )
    assert right.status_code == 403
    assert right.json()["code"] == 403

    wrong = await client.post(
        "/api/auth/login", json={"account": "alice99", "password": "nope123"}
    )
    assert wrong.status_code == 403


@pytest.mark.asyncio
async def test_login_upgrades_hash_from_older_cost(client, alice, session_factory):
    old_hash = bcrypt.hashpw(b"secret1", bcrypt.gensalt(rounds=4)).decode()
    async with session_factory() as db:
        await db.execute(
            update(Account)
            .where(Account.handle == "alice99")
            .values(password_hash=old_hash)
        )
        await db.commit()

    r = await client.post(
        "/api/auth/login", json={"account": "alice99", "password": "secret1"}
    )
    assert r.status_code == 200

    async with session_factory() as db:
        stored = (
            await db.execute(
                select(Account.password_hash).where(Account.handle == "alice99")
            )
        ).scalar_one()
    assert stored != old_hash
    assert stored.startswith(f"$2b${BCRYPT_ROUNDS:02d}$")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, message",
    [
        ({"account": "", "password": "secret1"}, "Account is required"),
        ({"account": "alice99", "password": ""}, "Password is required"),
        ({"password": "secret1"}, "account: Field required"),
    ],
)
async def test_login_validation(client, body, message):
    r = await client.post("/api/auth/login", json=body)
    assert r.status_code == 400
    assert r.json()["message"] == message


# ═══════════════════════════════════════════════════════════
# Logout
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_logout_requires_token(client):
    r = await client.post("/api/auth/logout")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_logout_is_stateless(client, alice_token):
    headers = {"Authorization": f"Bearer {alice_token}"}
    r = await client.post("/api/auth/logout", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"code": 200, "message": "Logout successful", "result": {}}

    # No server-side revocation: the token keeps working until it expires
    r = await client.get("/api/user/info", headers=headers)
    assert r.status_code == 200
