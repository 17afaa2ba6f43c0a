"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries everything the gate needs — the account id and its role — signed
with a process-wide secret. No session row exists server-side, so logout
is a client-side no-op and a token stays valid until it expires.

The secret, algorithm and lifetime arrive as an explicit TokenConfig
(built once from settings at startup), and the clock is injectable, so
tests can issue a token "yesterday" and verify it "today" without sleeping.
"""

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable

import jwt

from rentdesk.config import settings


class TokenError(Exception):
    """Raised when token verification fails."""


class InvalidSignature(TokenError):
    """The token was not signed with our secret (or was tampered with)."""


class TokenExpired(TokenError):
    """The token's exp claim is in the past."""


class MalformedToken(TokenError):
    """The token can't be parsed or lacks required claims."""


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    ttl: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls) -> "TokenConfig":
        return cls(
            secret=settings.jwt_secret,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
            algorithm=settings.jwt_algorithm,
        )


@dataclass(frozen=True)
class Claims:
    """Decoded, verified token payload."""

    account_id: uuid.UUID
    role: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies bearer tokens for one TokenConfig."""

    def __init__(
        self,
        config: TokenConfig,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config
        self.clock = clock

    def issue(self, account_id: uuid.UUID | str, role: str) -> str:
        """Create a signed token for an account.

        The lifetime always comes from config; callers can't pick one.
        """
        now = self.clock()
        payload = {
            "accountId": str(account_id),
            "role": role,
            "iat": int(now.timestamp()),
            "exp": math.ceil((now + self.config.ttl).timestamp()),
        }
        return jwt.encode(
            payload, self.config.secret, algorithm=self.config.algorithm
        )

    def verify(self, token: str) -> Claims:
        """Verify and decode a token.

        Learn: PyJWT checks the signature; expiry is checked here against
        self.clock so it honours an injected clock. The comparison is
        strict — no leeway for clock skew.
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["accountId", "role", "iat", "exp"],
                },
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise InvalidSignature(f"Invalid token signature: {e}") from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(f"Malformed token: {e}") from e

        try:
            account_id = uuid.UUID(str(payload["accountId"]))
            issued_at = datetime.fromtimestamp(int(payload["iat"]), timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), timezone.utc)
        except (TypeError, ValueError) as e:
            raise MalformedToken(f"Malformed token: {e}") from e

        if self.clock() > expires_at:
            raise TokenExpired("Token has expired")

        return Claims(
            account_id=account_id,
            role=str(payload["role"]),
            issued_at=issued_at,
            expires_at=expires_at,
        )


@lru_cache
def get_token_service() -> TokenService:
    """FastAPI dependency — one TokenService per process, built from settings."""
    return TokenService(TokenConfig.from_settings())
