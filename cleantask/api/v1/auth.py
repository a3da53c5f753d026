"""JWT login endpoint."""

from fastapi import APIRouter

from cleantask.api.deps import Accounts
from cleantask.schemas.account import AccountOut
from cleantask.schemas.auth import LoginRequest, TokenResponse
from cleantask.services.accounts import authenticate

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, repo: Accounts) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token valid for 24 hours.
    Include the token in the Authorization header as: Bearer <token>
    """
    token, account = authenticate(repo, body.email, body.password)
    return TokenResponse(
        token=token,
        token_type="bearer",
        account=AccountOut.model_validate(account),
    )
