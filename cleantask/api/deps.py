"""FastAPI dependencies shared by the routers: repository, current account, admin gate."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from cleantask.core.authz import AuthorizedContext, authorize
from cleantask.core.database import get_db
from cleantask.models.account import Role
from cleantask.repositories.accounts import AccountRepository, SqlAccountRepository

# auto_error=False: the gate itself tells a missing header from a malformed one.
security = HTTPBearer(
    auto_error=False,
    description="Access token from POST /auth/login, sent as `Authorization: Bearer <token>`.",
)


def get_account_repository(
    db: Annotated[Session, Depends(get_db)],
) -> AccountRepository:
    return SqlAccountRepository(db)


def get_authorization_header(
    request: Request,
    _credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Raw Authorization header; the HTTPBearer dependency declares the scheme in OpenAPI."""
    return request.headers.get("Authorization")


def get_current_account(
    authorization: Annotated[str | None, Depends(get_authorization_header)],
) -> AuthorizedContext:
    """Dependency: require a valid Bearer JWT of any role. Raises 401 otherwise."""
    return authorize(authorization)


def require_admin(
    authorization: Annotated[str | None, Depends(get_authorization_header)],
) -> AuthorizedContext:
    """Dependency: require a valid Bearer JWT with role admin. 401 if invalid, 403 for non-admin."""
    return authorize(authorization, required_role=Role.ADMIN)


Accounts = Annotated[AccountRepository, Depends(get_account_repository)]
CurrentAccount = Annotated[AuthorizedContext, Depends(get_current_account)]
AdminAccount = Annotated[AuthorizedContext, Depends(require_admin)]
