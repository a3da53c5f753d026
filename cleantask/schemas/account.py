"""Request/response schemas for account registration, profile and administration."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cleantask.models.account import Role


class AccountOut(BaseModel):
    """Account as returned to clients (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: Role
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RegisterRequest(BaseModel):
    """Self-registration payload."""

    name: str = Field(..., max_length=255, description="Display name")
    email: str = Field(..., max_length=255, description="Email (unique, case-insensitive)")
    password: str = Field(..., description="Password")
    confirm_password: str = Field(..., description="Must equal password")


class ProfileUpdateRequest(BaseModel):
    """Fields an account may change on itself. At least one is required."""

    name: str | None = Field(default=None, description="New display name")
    password: str | None = Field(default=None, description="New password")


class AdminAccountCreateRequest(BaseModel):
    """Account created by an administrator."""

    name: str
    email: str
    password: str
    role: Role = Role.REGULAR


class AdminAccountUpdateRequest(BaseModel):
    """Partial account update by an administrator."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: Role | None = None


class RoleUpdateRequest(BaseModel):
    role: Role


class AccountMessageResponse(BaseModel):
    """An account plus a human-readable outcome message."""

    account: AccountOut
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AccountListResponse(BaseModel):
    """Response for GET /admin/users (admin only)."""

    users: list[AccountOut]
    pagination: Pagination


class AccountStats(BaseModel):
    """Aggregate account counts for the admin dashboard."""

    total: int
    admins: int
    regular: int
    new_this_month: int
    new_this_week: int
