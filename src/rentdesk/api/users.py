"""User API — the caller's own profile.

Learn: Every route here depends on get_current_account, so the handler
only runs with a resolved Account and never has to look at the token.
- GET /user/info → profile
- PUT /user/info → partial update (incl. guarded password change)
- POST /user/avatar → multipart image upload
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.auth.dependencies import get_current_account
from rentdesk.db.engine import get_db
from rentdesk.db.models import Account
from rentdesk.errors import InvalidInput
from rentdesk.schemas.account import AccountRead, AvatarResult, ProfileUpdate
from rentdesk.schemas.envelope import Envelope
from rentdesk.services.account_service import AccountService
from rentdesk.services.upload_service import UploadService, get_upload_service

router = APIRouter(prefix="/user")


def _svc(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db)


async def read_upload(
    file: UploadFile | None, limit: int
) -> tuple[str, str | None, bytes]:
    """Read at most limit + 1 bytes, enough to tell an oversize file apart."""
    if file is None:
        raise InvalidInput("Please choose a file to upload")
    data = await file.read(limit + 1)
    return file.filename or "", file.content_type, data


@router.get("/info", response_model=Envelope[AccountRead])
async def get_info(account: Account = Depends(get_current_account)):
    return Envelope[AccountRead](
        message="Profile loaded", result=AccountRead.model_validate(account)
    )


@router.put("/info", response_model=Envelope[AccountRead])
async def update_info(
    body: ProfileUpdate,
    account: Account = Depends(get_current_account),
    svc: AccountService = Depends(_svc),
):
    account = await svc.update_profile(account, body)
    return Envelope[AccountRead](
        message="Profile updated", result=AccountRead.model_validate(account)
    )


@router.post("/avatar", response_model=Envelope[AvatarResult])
async def upload_avatar(
    avatar: UploadFile | None = File(None),
    account: Account = Depends(get_current_account),
    svc: AccountService = Depends(_svc),
    uploads: UploadService = Depends(get_upload_service),
):
    filename, content_type, data = await read_upload(avatar, uploads.max_bytes)
    account = await svc.update_avatar(account, uploads, filename, content_type, data)
    return Envelope[AvatarResult](
        message="Avatar uploaded", result=AvatarResult.model_validate(account)
    )
