"""Upload service — image uploads for avatars and product slides.

Learn: Where a file lands depends on what the request is about. Rather
than branching on request fields inline, the destinations are an ordered
list of named UploadTarget strategies; the first whose predicate matches
the UploadContext wins. Adding a destination means adding one entry.

Files are written under settings.upload_dir and served read-only at
/uploads by the static mount in main.py.
"""

import time
import uuid
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional, Sequence

import structlog

from rentdesk.config import settings
from rentdesk.errors import InvalidInput

logger = structlog.get_logger()

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}

URL_PREFIX = "/uploads"


@dataclass(frozen=True)
class UploadContext:
    """What an upload belongs to."""

    account_id: Optional[uuid.UUID] = None
    product_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class UploadTarget:
    name: str
    subdir: str
    matches: Callable[[UploadContext], bool]
    filename: Callable[[UploadContext, str], str]


@dataclass(frozen=True)
class StoredFile:
    target: str
    path: Path
    url: str


def _millis() -> int:
    return int(time.time() * 1000)


UPLOAD_TARGETS: tuple[UploadTarget, ...] = (
    UploadTarget(
        name="product",
        subdir="products",
        matches=lambda ctx: ctx.product_id is not None,
        filename=lambda ctx, ext: f"product_{ctx.product_id}_{_millis()}{ext}",
    ),
    UploadTarget(
        name="avatar",
        subdir="avatars",
        matches=lambda ctx: ctx.account_id is not None,
        filename=lambda ctx, ext: f"avatar_{ctx.account_id}_{_millis()}{ext}",
    ),
)


class UploadService:
    """Validates and stores uploaded images."""

    def __init__(
        self,
        root: Path,
        max_bytes: int,
        targets: Sequence[UploadTarget] = UPLOAD_TARGETS,
    ):
        self.root = root
        self.max_bytes = max_bytes
        self.targets = tuple(targets)

    def select_target(self, ctx: UploadContext) -> UploadTarget:
        for target in self.targets:
            if target.matches(ctx):
                return target
        raise InvalidInput("No upload destination for this request")

    def check_image(self, filename: str, content_type: Optional[str]) -> str:
        """Return the normalized extension, or raise for non-image files."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_CONTENT_TYPES:
            raise InvalidInput("Only image files (JPG, PNG, GIF) are allowed")
        return ext

    def store(
        self,
        filename: str,
        content_type: Optional[str],
        data: bytes,
        ctx: UploadContext,
    ) -> StoredFile:
        if not data:
            raise InvalidInput("Please choose a file to upload")
        if len(data) > self.max_bytes:
            raise InvalidInput(f"File is too large (limit {self.max_bytes} bytes)")
        ext = self.check_image(filename, content_type)
        target = self.select_target(ctx)

        directory = self.root / target.subdir
        directory.mkdir(parents=True, exist_ok=True)
        name = target.filename(ctx, ext)
        path = directory / name
        path.write_bytes(data)

        logger.info("upload.stored", target=target.name, file=name, size=len(data))
        return StoredFile(
            target=target.name,
            path=path,
            url=f"{URL_PREFIX}/{target.subdir}/{name}",
        )


@lru_cache
def get_upload_service() -> UploadService:
    """FastAPI dependency — one UploadService per process, built from settings."""
    return UploadService(Path(settings.upload_dir), settings.max_upload_bytes)
