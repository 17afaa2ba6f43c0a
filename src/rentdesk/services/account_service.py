"""Account service — registration, login, and profile updates.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the credential store.
Registration and login establish identity, so they never pass through
the auth gate; profile operations receive the Account the gate resolved.

Error semantics worth knowing:
- login reports "Account not found" without saying whether the handle
  or the phone was tried
- a disabled account gets 403 (Forbidden), distinct from the 400 for a
  wrong password, and the status check happens before the password check
- a password change re-verifies the current password before anything
  is written
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.auth.jwt import TokenService
from rentdesk.auth.password import needs_rehash, verify_password
from rentdesk.auth.store import AccountStore
from rentdesk.db.models import (
    DEFAULT_TRUST_SCORE,
    Account,
    AccountRole,
    AccountStatus,
)
from rentdesk.errors import Forbidden, InvalidInput
from rentdesk.schemas.account import ProfileUpdate, RegisterRequest
from rentdesk.services.upload_service import UploadContext, UploadService

logger = structlog.get_logger()


class AccountService:
    """Business logic for the account lifecycle."""

    def __init__(self, db: AsyncSession, tokens: TokenService | None = None):
        self.db = db
        self.store = AccountStore(db)
        self.tokens = tokens

    # ─── Register ───────────────────────────────────────

    async def register(
        self,
        body: RegisterRequest,
        role: AccountRole = AccountRole.USER,
    ) -> Account:
        conflicts = await self.store.exists_by_handle_or_phone(body.handle, body.phone)
        conflicts.raise_if_any()

        account = await self.store.create(
            password=body.password,
            handle=body.handle,
            phone=body.phone,
            display_name=body.display_name or "",
            avatar=body.avatar or None,
            gender=body.gender,
            birthday=body.birthday,
            role=role.value,
            status=AccountStatus.NORMAL.value,
            trust_score=DEFAULT_TRUST_SCORE,
        )
        logger.info("account.registered", account_id=str(account.id), role=role.value)
        return account

    # ─── Login ──────────────────────────────────────────

    async def login(self, identifier: str, password: str) -> tuple[str, Account]:
        """Check credentials and issue a token. Returns (token, account)."""
        if self.tokens is None:
            raise RuntimeError("AccountService.login needs a TokenService")

        account = await self.store.find_by_handle_or_phone(identifier)
        if not account:
            logger.info("auth.login_failed", reason="not_found")
            raise InvalidInput("Account not found")

        if account.is_disabled:
            logger.info("auth.login_failed", reason="disabled", account_id=str(account.id))
            raise Forbidden("Account is disabled, please contact an administrator")

        if not verify_password(password, account.password_hash):
            logger.info("auth.login_failed", reason="bad_password", account_id=str(account.id))
            raise InvalidInput("Wrong password")

        # Hashes made under an older cost factor are upgraded on successful login
        if needs_rehash(account.password_hash):
            await self.store.update(account, {}, password=password)
            logger.info("auth.password_rehashed", account_id=str(account.id))

        token = self.tokens.issue(account.id, account.role)
        logger.info("auth.login", account_id=str(account.id))
        return token, account

    # ─── Profile ────────────────────────────────────────

    async def update_profile(self, account: Account, body: ProfileUpdate) -> Account:
        """Partial update of the caller's own account.

        Learn: every check runs before the first write, so a rejected
        request leaves the stored account exactly as it was.
        """
        changes = body.profile_changes()

        new_handle = changes.get("handle")
        if new_handle == account.handle:
            new_handle = None
        new_phone = changes.get("phone")
        if new_phone == account.phone:
            new_phone = None
        if new_handle is not None or new_phone is not None:
            conflicts = await self.store.exists_by_handle_or_phone(
                new_handle, new_phone, exclude_id=account.id
            )
            conflicts.raise_if_any()

        new_password = None
        if body.password is not None:
            if not body.old_password:
                raise InvalidInput("Please enter your current password")
            stored = await self.store.get(account.id, with_password=True)
            if not stored or not verify_password(body.old_password, stored.password_hash):
                raise InvalidInput("Old password is incorrect")
            new_password = body.password

        account = await self.store.update(account, changes, password=new_password)
        logger.info(
            "account.updated",
            account_id=str(account.id),
            fields=sorted(changes),
            password_changed=new_password is not None,
        )
        return account

    async def update_avatar(
        self,
        account: Account,
        uploads: UploadService,
        filename: str,
        content_type: str | None,
        data: bytes,
    ) -> Account:
        stored = uploads.store(
            filename, content_type, data, UploadContext(account_id=account.id)
        )
        return await self.store.update(account, {"avatar": stored.url})
