"""Pydantic request/response schemas."""

from cleantask.schemas.account import (
    AccountListResponse,
    AccountMessageResponse,
    AccountOut,
    AccountStats,
    AdminAccountCreateRequest,
    AdminAccountUpdateRequest,
    Pagination,
    ProfileUpdateRequest,
    RegisterRequest,
    RoleUpdateRequest,
)
from cleantask.schemas.auth import LoginRequest, TokenResponse
from cleantask.schemas.health import HealthResponse

__all__ = [
    "AccountListResponse",
    "AccountMessageResponse",
    "AccountOut",
    "AccountStats",
    "AdminAccountCreateRequest",
    "AdminAccountUpdateRequest",
    "HealthResponse",
    "LoginRequest",
    "Pagination",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "RoleUpdateRequest",
    "TokenResponse",
]
