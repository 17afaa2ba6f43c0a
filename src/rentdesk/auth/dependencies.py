"""FastAPI auth dependencies — the per-request gate.

Learn: These are used as Depends() in route handlers (or at include_router
level) to resolve the bearer token into a live Account before the handler
runs. Either the request proceeds with a trusted principal attached to
request.state.account, or it is rejected with 401 and the handler never
executes.

Steps:
1. Authorization header must start with exactly "Bearer "
2. Token signature + expiry check (TokenService)
3. Account lookup by the token's accountId — a token for a deleted
   account is rejected
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.auth.jwt import (
    InvalidSignature,
    TokenError,
    TokenExpired,
    TokenService,
    get_token_service,
)
from rentdesk.auth.store import AccountStore
from rentdesk.config import settings
from rentdesk.db.engine import get_db
from rentdesk.db.models import Account, AccountRole
from rentdesk.errors import Forbidden, Unauthenticated

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an Authorization header value."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthenticated("Not authenticated, please log in")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated("Not authenticated, please log in")
    return token


async def get_current_account(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> Account:
    """Resolve the request's bearer token to an Account (required — 401 otherwise)."""
    token = extract_bearer_token(authorization)

    try:
        claims = tokens.verify(token)
    except TokenExpired:
        raise Unauthenticated("Token has expired, please log in again")
    except InvalidSignature:
        raise Unauthenticated("Invalid token")
    except TokenError as e:
        logger.info("auth.malformed_token", error=str(e))
        raise Unauthenticated("Invalid token")

    account = await AccountStore(db).get(claims.account_id)
    if not account:
        raise Unauthenticated("Account no longer exists")

    if settings.gate_rejects_disabled and account.is_disabled:
        raise Forbidden("Account is disabled, please contact an administrator")

    request.state.account = account
    structlog.contextvars.bind_contextvars(account_id=str(account.id))
    return account


async def require_admin(
    account: Account = Depends(get_current_account),
) -> Account:
    """Gate plus a role check — 403 unless the account is an admin."""
    if account.role != AccountRole.ADMIN.value:
        raise Forbidden("Administrator privileges required")
    return account
