"""The authenticated account's own profile."""

from fastapi import APIRouter

from cleantask.api.deps import Accounts, CurrentAccount
from cleantask.schemas.account import AccountMessageResponse, AccountOut, ProfileUpdateRequest
from cleantask.services.accounts import get_account, update_profile

router = APIRouter()


@router.get("", response_model=AccountOut)
def read_profile(ctx: CurrentAccount, repo: Accounts) -> AccountOut:
    return AccountOut.model_validate(get_account(repo, ctx.subject_id))


@router.patch("", response_model=AccountMessageResponse)
def patch_profile(
    body: ProfileUpdateRequest,
    ctx: CurrentAccount,
    repo: Accounts,
) -> AccountMessageResponse:
    """Change display name and/or password (8+ characters)."""
    account = update_profile(repo, ctx, body)
    return AccountMessageResponse(
        account=AccountOut.model_validate(account),
        message="Profile updated",
    )
