"""Public self-registration endpoint."""

from fastapi import APIRouter, status

from cleantask.api.deps import Accounts
from cleantask.schemas.account import AccountOut, RegisterRequest
from cleantask.services.accounts import register_account

router = APIRouter()


@router.post("", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, repo: Accounts) -> AccountOut:
    """
    Create a regular account. Password needs 8+ characters with an uppercase letter,
    a lowercase letter and a digit, and must match confirm_password.
    """
    account = register_account(repo, body)
    return AccountOut.model_validate(account)
