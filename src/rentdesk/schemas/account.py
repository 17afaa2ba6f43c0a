"""Pydantic schemas for accounts: registration, login, profile.

Learn: The JSON API speaks camelCase (confirmPassword, trustScore) while
Python code uses snake_case. alias_generator=to_camel with
populate_by_name=True accepts both on input; FastAPI serializes
response models by alias, so output is camelCase.

No read schema has a password field — the hash can't leak through a
response even by accident.
"""

import re
import uuid
from datetime import date, datetime
from typing import Annotated, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

PHONE_PATTERN = re.compile(r"^1[3-9]\d{9}$")
PASSWORD_MIN = 6
PASSWORD_MAX = 16

Handle = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=3, max_length=15)
]
Password = Annotated[str, Field(min_length=PASSWORD_MIN, max_length=PASSWORD_MAX)]
Gender = Literal["male", "female"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone number")
    return value


def _check_birthday(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("Birthday must be a YYYY-MM-DD date")
    return value


# ─── Register ───────────────────────────────────────────


class RegisterRequest(CamelModel):
    handle: Handle
    password: Password
    phone: str
    confirm_password: str
    display_name: str = Field(default="", max_length=100)
    avatar: Optional[str] = None
    gender: Optional[Gender] = None
    birthday: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)

    @field_validator("birthday")
    @classmethod
    def birthday_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_birthday(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


# ─── Login ──────────────────────────────────────────────


class LoginRequest(CamelModel):
    account: str = Field(description="Handle or phone number")
    password: str

    @field_validator("account")
    @classmethod
    def account_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Account is required")
        return v

    @field_validator("password")
    @classmethod
    def password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


# ─── Profile ────────────────────────────────────────────


class ProfileUpdate(CamelModel):
    """Partial profile update. Only fields present in the body change."""

    handle: Optional[Handle] = None
    phone: Optional[str] = None
    display_name: Optional[str] = Field(default=None, max_length=100)
    gender: Optional[Gender] = None
    birthday: Optional[str] = None
    id_document: Optional[str] = Field(default=None, max_length=255)
    payment_account: Optional[str] = Field(default=None, max_length=100)

    # Checked against the stored hash only; any length may be wrong.
    old_password: Optional[str] = None
    password: Optional[Password] = None
    confirm_password: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)

    @field_validator("birthday")
    @classmethod
    def birthday_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_birthday(v)

    @model_validator(mode="after")
    def new_passwords_match(self):
        if (
            self.password is not None
            and self.confirm_password is not None
            and self.confirm_password != self.password
        ):
            raise ValueError("New passwords do not match")
        return self

    def profile_changes(self) -> dict:
        """Supplied non-password fields, by attribute name."""
        data = self.model_dump(
            exclude_unset=True,
            exclude={"old_password", "password", "confirm_password"},
        )
        return {k: v for k, v in data.items() if v is not None}


class AccountRead(CamelModel):
    account_id: uuid.UUID = Field(
        validation_alias=AliasChoices("id", "accountId", "account_id"),
        serialization_alias="accountId",
    )
    handle: str
    display_name: str
    phone: str
    avatar: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[str] = None
    id_document: str
    payment_account: str
    trust_score: int
    status: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginResult(CamelModel):
    token: str
    token_type: str = "Bearer"
    account: AccountRead


class AvatarResult(CamelModel):
    account_id: uuid.UUID = Field(
        validation_alias=AliasChoices("id", "accountId", "account_id"),
        serialization_alias="accountId",
    )
    avatar: Optional[str] = None
