"""Credential store tests — lookups, uniqueness, and the single hashing hook."""

import uuid

import pytest
from sqlalchemy.exc import InvalidRequestError

from rentdesk.auth.password import verify_password
from rentdesk.auth.store import AccountStore
from rentdesk.errors import DuplicateIdentity, NotFound


async def _create(db, handle="alice99", phone="13800000001", password="secret1"):
    return await AccountStore(db).create(password=password, handle=handle, phone=phone)


@pytest.mark.asyncio
async def test_create_stores_hash_not_plaintext(db_session):
    account = await _create(db_session)
    assert account.password_hash != "secret1"
    assert verify_password("secret1", account.password_hash)
    assert account.role == "user"
    assert account.status == "normal"
    assert account.trust_score == 600


@pytest.mark.asyncio
async def test_find_by_handle_or_phone_matches_both(db_session, session_factory):
    created = await _create(db_session)

    async with session_factory() as db:
        store = AccountStore(db)
        by_handle = await store.find_by_handle_or_phone("alice99")
        by_phone = await store.find_by_handle_or_phone("13800000001")
        assert by_handle.id == by_phone.id == created.id
        # login path includes the hash
        assert verify_password("secret1", by_handle.password_hash)
        assert await store.find_by_handle_or_phone("nobody") is None


@pytest.mark.asyncio
async def test_plain_get_does_not_load_password_hash(db_session, session_factory):
    created = await _create(db_session)

    async with session_factory() as db:
        account = await AccountStore(db).get(created.id)
        assert account.handle == "alice99"
        with pytest.raises(InvalidRequestError):
            account.password_hash


@pytest.mark.asyncio
async def test_get_or_404(db_session):
    with pytest.raises(NotFound):
        await AccountStore(db_session).get_or_404(uuid.uuid4())


@pytest.mark.asyncio
async def test_exists_reports_which_field_collided(db_session):
    await _create(db_session)
    store = AccountStore(db_session)

    c = await store.exists_by_handle_or_phone("alice99", "13800000002")
    assert c.handle_taken and not c.phone_taken

    c = await store.exists_by_handle_or_phone("bob", "13800000001")
    assert c.phone_taken and not c.handle_taken

    assert not await store.exists_by_handle_or_phone("bob", "13800000002")


@pytest.mark.asyncio
async def test_exists_ignores_own_row(db_session):
    account = await _create(db_session)
    c = await AccountStore(db_session).exists_by_handle_or_phone(
        "alice99", "13800000001", exclude_id=account.id
    )
    assert not c


@pytest.mark.asyncio
async def test_unique_index_rejects_duplicate_handle_without_precheck(db_session):
    """Two racing registrations: the database decides, and names the field."""
    await _create(db_session)
    with pytest.raises(DuplicateIdentity) as exc:
        await _create(db_session, phone="13800000002")
    assert exc.value.field == "handle"


@pytest.mark.asyncio
async def test_unique_index_rejects_duplicate_phone_without_precheck(db_session):
    await _create(db_session)
    with pytest.raises(DuplicateIdentity) as exc:
        await _create(db_session, handle="bob123")
    assert exc.value.field == "phone"


@pytest.mark.asyncio
async def test_update_without_password_keeps_hash(db_session, session_factory):
    account = await _create(db_session)

    async with session_factory() as db:
        store = AccountStore(db)
        loaded = await store.get(account.id, with_password=True)
        before = loaded.password_hash
        await store.update(loaded, {"display_name": "Alice"})
        after = (await store.get(account.id, with_password=True)).password_hash
        assert after == before


@pytest.mark.asyncio
async def test_update_with_password_rehashes_once(db_session, session_factory):
    account = await _create(db_session)

    async with session_factory() as db:
        store = AccountStore(db)
        loaded = await store.get(account.id)
        await store.update(loaded, {}, password="newpass1")

    async with session_factory() as db:
        stored = await AccountStore(db).get(account.id, with_password=True)
        assert verify_password("newpass1", stored.password_hash)
        assert not verify_password("secret1", stored.password_hash)
