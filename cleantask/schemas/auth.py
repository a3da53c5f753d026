"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, Field

from cleantask.schemas.account import AccountOut


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., max_length=255, description="Account email")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login, with the account it belongs to."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    account: AccountOut
