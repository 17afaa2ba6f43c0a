"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Environment is pinned before the app is imported (SQLite URL, a fixed
   JWT secret, a throwaway upload dir), so importing rentdesk.main never
   needs PostgreSQL.
2. Each test gets its own in-memory SQLite engine (StaticPool keeps the
   single connection alive) with the schema created from the models.
3. The app's get_db is overridden to hand out sessions from that engine,
   one per request — like production, a follow-up request sees only
   what was committed.
4. get_token_service is overridden with a TokenService built from a
   fixed TokenConfig, so tests can mint tokens with the same secret.
"""

import os
import tempfile
from datetime import timedelta

os.environ.setdefault("RENTDESK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RENTDESK_ENVIRONMENT", "test")
os.environ.setdefault(
    "RENTDESK_JWT_SECRET", "test-secret-please-ignore-0123456789abcdef"
)
os.environ.setdefault("RENTDESK_UPLOAD_DIR", tempfile.mkdtemp(prefix="rentdesk-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rentdesk.auth.jwt import TokenConfig, TokenService, get_token_service
from rentdesk.db.engine import get_db
from rentdesk.db.models import AccountRole, Base
from rentdesk.main import app
from rentdesk.schemas.account import RegisterRequest
from rentdesk.services.account_service import AccountService
from rentdesk.services.upload_service import UploadService, get_upload_service

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

ALICE = {
    "handle": "alice99",
    "password": "secret1",
    "phone": "13800000001",
    "confirmPassword": "secret1",
}


@pytest.fixture()
def token_config() -> TokenConfig:
    return TokenConfig(
        secret="test-secret-please-ignore-0123456789abcdef",
        ttl=timedelta(minutes=60),
    )


@pytest.fixture()
def token_service(token_config) -> TokenService:
    return TokenService(token_config)


@pytest.fixture()
def upload_service(tmp_path) -> UploadService:
    return UploadService(tmp_path / "uploads", max_bytes=1024)


@pytest_asyncio.fixture()
async def session_factory():
    """Per-test engine with all tables created."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory, token_service, upload_service):
    """HTTP client against the real app with DB, tokens and uploads overridden.

    Learn: Auth is NOT overridden — every protected request in the tests
    goes through the real gate with a real token.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_upload_service] = lambda: upload_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def alice(client):
    """Registered account alice99 — returns the register result."""
    r = await client.post("/api/auth/register", json=ALICE)
    assert r.status_code == 200, r.text
    return r.json()["result"]


@pytest_asyncio.fixture()
async def alice_token(client, alice):
    r = await client.post(
        "/api/auth/login",
        json={"account": ALICE["phone"], "password": ALICE["password"]},
    )
    assert r.status_code == 200, r.text
    return r.json()["result"]["token"]


@pytest_asyncio.fixture()
async def admin_token(client, session_factory):
    """An admin account created through the service (no HTTP route makes admins)."""
    async with session_factory() as db:
        await AccountService(db).register(
            RegisterRequest(
                handle="root",
                password="rootpass",
                phone="13900000000",
                confirm_password="rootpass",
            ),
            role=AccountRole.ADMIN,
        )
    r = await client.post(
        "/api/auth/login", json={"account": "root", "password": "rootpass"}
    )
    assert r.status_code == 200, r.text
    return r.json()["result"]["token"]
