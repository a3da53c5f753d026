"""Account administration endpoints (admin role required on every route)."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from cleantask.api.deps import Accounts, AdminAccount
from cleantask.models.account import Role
from cleantask.schemas.account import (
    AccountListResponse,
    AccountMessageResponse,
    AccountOut,
    AccountStats,
    AdminAccountCreateRequest,
    AdminAccountUpdateRequest,
    RoleUpdateRequest,
)
from cleantask.services import accounts as account_service

router = APIRouter()


@router.get("/users", response_model=AccountListResponse)
def list_users(
    _admin: AdminAccount,
    repo: Accounts,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=account_service.MAX_PAGE_SIZE)] = 10,
    search: str | None = None,
    role: Role | None = None,
) -> AccountListResponse:
    """List accounts, newest first. search matches name or email (case-insensitive)."""
    items, pagination = account_service.list_accounts(
        repo, page=page, limit=limit, search=search, role=role
    )
    return AccountListResponse(
        users=[AccountOut.model_validate(a) for a in items],
        pagination=pagination,
    )


@router.post("/users", response_model=AccountMessageResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: AdminAccountCreateRequest,
    admin: AdminAccount,
    repo: Accounts,
) -> AccountMessageResponse:
    account = account_service.create_account(repo, admin, body)
    return AccountMessageResponse(
        account=AccountOut.model_validate(account),
        message="Account created",
    )


@router.get("/users/{account_id}", response_model=AccountOut)
def get_user(account_id: int, _admin: AdminAccount, repo: Accounts) -> AccountOut:
    return AccountOut.model_validate(account_service.get_account(repo, account_id))


@router.patch("/users/{account_id}", response_model=AccountMessageResponse)
def update_user(
    account_id: int,
    body: AdminAccountUpdateRequest,
    admin: AdminAccount,
    repo: Accounts,
) -> AccountMessageResponse:
    """Partial update. An admin cannot demote themselves."""
    account = account_service.update_account(repo, admin, account_id, body)
    return AccountMessageResponse(
        account=AccountOut.model_validate(account),
        message="Account updated",
    )


@router.patch("/users/{account_id}/role", response_model=AccountMessageResponse)
def update_user_role(
    account_id: int,
    body: RoleUpdateRequest,
    admin: AdminAccount,
    repo: Accounts,
) -> AccountMessageResponse:
    account, changed = account_service.change_role(repo, admin, account_id, body.role)
    message = (
        f"Role of {account.name} updated to {account.role.value}"
        if changed
        else f"Account already has role {account.role.value}"
    )
    return AccountMessageResponse(account=AccountOut.model_validate(account), message=message)


@router.delete("/users/{account_id}", response_model=AccountMessageResponse)
def delete_user(account_id: int, admin: AdminAccount, repo: Accounts) -> AccountMessageResponse:
    """Delete an account. An admin cannot delete their own account here."""
    snapshot = account_service.delete_account(repo, admin, account_id)
    return AccountMessageResponse(account=snapshot, message=f"Account {snapshot.name} deleted")


@router.get("/stats", response_model=AccountStats)
def get_stats(_admin: AdminAccount, repo: Accounts) -> AccountStats:
    return account_service.account_stats(repo)
