"""Password hashing and JWT creation/verification for authentication."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from cleantask.core.config import settings
from cleantask.models.account import Role

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; longer passwords are refused, not truncated.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for input validation at the edge.
NAME_MIN_LEN = 2
NAME_MAX_LEN = 100
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_BYTES = BCRYPT_MAX_BYTES

REQUIRED_CLAIMS = ("sub", "role", "iat", "exp")


class TokenError(Exception):
    """Base for token verification failures. `reason` is a stable code for logs."""

    reason = "invalid_token"


class TokenMissingError(TokenError):
    reason = "token_missing"


class TokenMalformedError(TokenError):
    reason = "token_malformed"


class TokenExpiredError(TokenError):
    reason = "token_expired"


class TokenBadSignatureError(TokenError):
    reason = "token_bad_signature"


class TokenClaims(BaseModel):
    """Exact claim set carried by an access token; unknown claims are rejected."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sub: str
    role: Role
    iat: int
    exp: int

    @field_validator("sub")
    @classmethod
    def validate_sub(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("sub must be a numeric account id")
        return v

    @property
    def subject_id(self) -> int:
        return int(self.sub)


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """
    Hash a plain-text password for storage. Each call uses a fresh random salt.

    Raises ValueError for passwords over BCRYPT_MAX_BYTES; bcrypt would otherwise
    ignore everything past that point.
    """
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > BCRYPT_MAX_BYTES:
        raise ValueError(f"password is longer than {BCRYPT_MAX_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash.

    A malformed hash never matches, and neither does a password too long to have been hashed.
    """
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        logger.warning("Stored password hash is malformed; treating as mismatch.")
        return False


def create_access_token(
    sub: str | int,
    role: Role,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with sub (account id), role, iat and exp."""
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload: dict[str, Any] = {
        "sub": str(sub),
        "role": Role(role).value,
        "iat": now,
        "exp": expire,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry, then validate the claim set.

    Raises TokenExpiredError, TokenBadSignatureError or TokenMalformedError.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": list(REQUIRED_CLAIMS)},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("token has expired") from e
    except jwt.InvalidSignatureError as e:
        raise TokenBadSignatureError("token signature does not match") from e
    except jwt.PyJWTError as e:
        raise TokenMalformedError(f"token could not be decoded: {e}") from e

    try:
        return TokenClaims.model_validate(payload)
    except ValidationError as e:
        raise TokenMalformedError("token claims are invalid") from e
