"""Credential store — account persistence and identity uniqueness.

Learn: All reads and writes of the accounts table go through AccountStore.
It owns three rules:

1. Login lookup matches handle OR phone in a single query, and it is the
   only read path that loads password_hash.
2. handle and phone are unique. The pre-check tells registration which
   one collided; the unique indexes settle concurrent registrations that
   both pass the pre-check (the loser's IntegrityError becomes the same
   DuplicateIdentity error).
3. The password hash is written in one place, _apply_password(), and only
   when the caller passes a new plaintext password. Saving any other field
   never touches the hash.
"""

import uuid
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from rentdesk.auth.password import hash_password
from rentdesk.db.models import Account
from rentdesk.errors import DuplicateIdentity, NotFound

logger = structlog.get_logger()

HANDLE_TAKEN = "Handle already exists"
PHONE_TAKEN = "Phone number already exists"


@dataclass(frozen=True)
class IdentityConflicts:
    handle_taken: bool = False
    phone_taken: bool = False

    def __bool__(self) -> bool:
        return self.handle_taken or self.phone_taken

    def raise_if_any(self) -> None:
        """Raise DuplicateIdentity for the first colliding field (handle wins)."""
        if self.handle_taken:
            raise DuplicateIdentity("handle", HANDLE_TAKEN)
        if self.phone_taken:
            raise DuplicateIdentity("phone", PHONE_TAKEN)


class AccountStore:
    """Data access for accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────

    async def get(
        self, account_id: uuid.UUID, with_password: bool = False
    ) -> Account | None:
        q = select(Account).where(Account.id == account_id)
        if with_password:
            q = q.options(undefer(Account.password_hash)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(q)
        return result.scalars().first()

    async def get_or_404(self, account_id: uuid.UUID) -> Account:
        account = await self.get(account_id)
        if not account:
            raise NotFound("Account not found")
        return account

    async def find_by_handle_or_phone(self, identifier: str) -> Account | None:
        """Login lookup: one query over both identity fields, hash included."""
        q = (
            select(Account)
            .where(or_(Account.handle == identifier, Account.phone == identifier))
            .options(undefer(Account.password_hash))
            .execution_options(populate_existing=True)
            .limit(1)
        )
        result = await self.db.execute(q)
        return result.scalars().first()

    async def exists_by_handle_or_phone(
        self,
        handle: str | None,
        phone: str | None,
        exclude_id: uuid.UUID | None = None,
    ) -> IdentityConflicts:
        """Report which of handle / phone already belong to another account.

        None means "not being checked". exclude_id skips the caller's own row
        so an unchanged handle doesn't collide with itself.
        """
        conditions = []
        if handle is not None:
            conditions.append(Account.handle == handle)
        if phone is not None:
            conditions.append(Account.phone == phone)
        if not conditions:
            return IdentityConflicts()

        q = select(Account.handle, Account.phone).where(or_(*conditions))
        if exclude_id is not None:
            q = q.where(Account.id != exclude_id)
        rows = (await self.db.execute(q)).all()

        return IdentityConflicts(
            handle_taken=handle is not None and any(r.handle == handle for r in rows),
            phone_taken=phone is not None and any(r.phone == phone for r in rows),
        )

    # ─── Writes ─────────────────────────────────────────

    async def create(self, password: str, **fields: Any) -> Account:
        account = Account(**fields)
        self._apply_password(account, password)
        self.db.add(account)
        await self._commit(account)
        return account

    async def update(
        self,
        account: Account,
        changes: dict[str, Any],
        password: str | None = None,
    ) -> Account:
        """Apply field changes; rehash only when a new password is passed."""
        for field, value in changes.items():
            setattr(account, field, value)
        if password is not None:
            self._apply_password(account, password)
        await self._commit(account)
        return account

    def _apply_password(self, account: Account, password: str) -> None:
        """The one place a password becomes a stored hash."""
        account.password_hash = hash_password(password)

    async def _commit(self, account: Account) -> None:
        # Rollback expires the instance, so read what the conflict check needs first.
        account_id, handle, phone = account.id, account.handle, account.phone
        try:
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info("account.unique_violation", handle=handle, error=str(e.orig))
            conflicts = await self.exists_by_handle_or_phone(
                handle, phone, exclude_id=account_id
            )
            conflicts.raise_if_any()
            raise
