"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Constraints and indexes are defined here, and
Alembic auto-generates migrations by comparing these models to the actual DB.

Key concepts:
- UUID primary keys, generated client-side, never reused
- Unique indexes on every identity field: the database, not the
  application, has the final say when two registrations race
- server_default for DB-level defaults (work even for raw SQL inserts)
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class AccountStatus(str, enum.Enum):
    NORMAL = "normal"
    DISABLED = "disabled"


class AccountRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


DEFAULT_TRUST_SCORE = 600


class Account(Base):
    """A registered customer or administrator.

    Learn: handle and phone are both login identifiers, so both carry a
    unique index. password_hash is deferred with raiseload: loading an
    Account never pulls the hash, and touching it without an explicit
    undefer() raises instead of silently issuing a query. Only the
    credential store's login path asks for it.
    """

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    handle: Mapped[str] = mapped_column(
        String(15), unique=True, index=True, nullable=False
    )
    phone: Mapped[str] = mapped_column(
        String(11), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, deferred=True, deferred_raiseload=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AccountStatus.NORMAL.value
    )  # normal, disabled
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AccountRole.USER.value
    )  # user, admin

    # Profile: free-form, no uniqueness
    display_name: Mapped[str] = mapped_column(String(100), default="")
    avatar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(
        String(10), nullable=True
    )  # male, female
    birthday: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    id_document: Mapped[str] = mapped_column(String(255), default="")
    payment_account: Mapped[str] = mapped_column(String(100), default="")
    trust_score: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_TRUST_SCORE
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=utcnow,
        onupdate=utcnow,
    )

    @property
    def is_disabled(self) -> bool:
        return self.status == AccountStatus.DISABLED.value


class Product(Base):
    """A carousel item shown on the storefront home page."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=utcnow,
        onupdate=utcnow,
    )
