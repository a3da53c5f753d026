"""
Authorization gate: bearer token verification, role check and self-action guards.

Every protected route goes through `authorize` (via the dependencies in
cleantask.api.deps). Verification is stateless: the decision depends only on the
presented token, the configured secret and the required role.
"""

import logging
from dataclasses import dataclass

from fastapi.security.utils import get_authorization_scheme_param

from cleantask.core.errors import AuthenticationError, AuthorizationError
from cleantask.core.security import (
    TokenError,
    TokenMalformedError,
    TokenMissingError,
    decode_access_token,
)
from cleantask.models.account import Role

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class AuthorizedContext:
    """Identity admitted by the gate."""

    subject_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def extract_bearer_token(authorization: str | None) -> str:
    """Return the credentials part of an `Authorization: Bearer <token>` header."""
    if authorization is None or not authorization.strip():
        raise TokenMissingError("no Authorization header")
    scheme, credentials = get_authorization_scheme_param(authorization.strip())
    if scheme.lower() != BEARER_SCHEME or not credentials.strip():
        raise TokenMalformedError("Authorization header is not a bearer token")
    return credentials.strip()


def authorize(authorization: str | None, required_role: Role | None = None) -> AuthorizedContext:
    """
    Admit or reject a request from its Authorization header.

    Raises AuthenticationError (401) for any token problem and AuthorizationError
    (403) when the verified role does not match required_role.
    """
    try:
        token = extract_bearer_token(authorization)
        claims = decode_access_token(token)
    except TokenMissingError as e:
        logger.info("Rejected request: reason=%s", e.reason)
        raise AuthenticationError("Not authenticated", reason=e.reason) from e
    except TokenError as e:
        logger.info("Rejected request: reason=%s", e.reason)
        raise AuthenticationError("Invalid or expired token", reason=e.reason) from e

    ctx = AuthorizedContext(subject_id=claims.subject_id, role=claims.role)
    if required_role is not None and ctx.role is not required_role:
        logger.info(
            "Forbidden: account_id=%s role=%s required=%s",
            ctx.subject_id,
            ctx.role.value,
            required_role.value,
        )
        raise AuthorizationError(
            "Administrator access required"
            if required_role is Role.ADMIN
            else f"Role '{required_role.value}' required",
            code="insufficient_role",
        )
    return ctx


def ensure_not_self_demotion(ctx: AuthorizedContext, target_id: int, new_role: Role | None) -> None:
    """An admin may not move their own account away from the admin role."""
    if new_role is None:
        return
    if ctx.subject_id == target_id and ctx.is_admin and new_role is not Role.ADMIN:
        logger.warning("Blocked self-demotion: account_id=%s", ctx.subject_id)
        raise AuthorizationError(
            "You cannot change your own administrator role",
            code="self_demotion",
        )


def ensure_not_self_deletion(ctx: AuthorizedContext, target_id: int) -> None:
    """An admin may not delete their own account through the admin surface."""
    if ctx.subject_id == target_id:
        logger.warning("Blocked self-deletion: account_id=%s", ctx.subject_id)
        raise AuthorizationError(
            "You cannot delete your own administrator account",
            code="self_deletion",
        )
