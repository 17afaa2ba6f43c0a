"""Auth API — registration, login, logout.

Learn: Routes for establishing identity:
- POST /auth/register → create a new account
- POST /auth/login → handle-or-phone + password → bearer token
- POST /auth/logout → no-op (tokens are stateless; the client drops it)

register and login are open; logout sits behind the gate so a client
learns when its token is already dead.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.auth.dependencies import get_current_account
from rentdesk.auth.jwt import TokenService, get_token_service
from rentdesk.db.engine import get_db
from rentdesk.db.models import Account
from rentdesk.schemas.account import (
    AccountRead,
    LoginRequest,
    LoginResult,
    RegisterRequest,
)
from rentdesk.schemas.envelope import Envelope
from rentdesk.services.account_service import AccountService

router = APIRouter(prefix="/auth")


def _svc(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(db, tokens)


@router.post("/register", response_model=Envelope[AccountRead])
async def register(body: RegisterRequest, svc: AccountService = Depends(_svc)):
    """Create a new account with role user and status normal."""
    account = await svc.register(body)
    return Envelope[AccountRead](
        message="Registration successful",
        result=AccountRead.model_validate(account),
    )


@router.post("/login", response_model=Envelope[LoginResult])
async def login(body: LoginRequest, svc: AccountService = Depends(_svc)):
    """Login with handle or phone → bearer token + profile."""
    token, account = await svc.login(body.account, body.password)
    return Envelope[LoginResult](
        message="Login successful",
        result=LoginResult(token=token, account=AccountRead.model_validate(account)),
    )


@router.post("/logout", response_model=Envelope[dict])
async def logout(account: Account = Depends(get_current_account)):
    """Stateless logout — the token stays valid until it expires."""
    return Envelope[dict](message="Logout successful", result={})
