"""
Account use cases: registration, login, profile, and administration.

Routes stay thin and call these functions with a repository and, for protected
operations, the AuthorizedContext admitted by the gate. Failures are raised as
cleantask.core.errors exceptions and rendered by the app's exception handlers.
"""

import logging
import math
import re
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from cleantask.core.authz import (
    AuthorizedContext,
    ensure_not_self_deletion,
    ensure_not_self_demotion,
)
from cleantask.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from cleantask.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LEN,
    create_access_token,
    hash_password,
    verify_password,
)
from cleantask.models.account import Account, Role
from cleantask.repositories.accounts import (
    EMAIL_TAKEN_MESSAGE,
    AccountRepository,
    normalize_email,
)
from cleantask.schemas.account import (
    AccountOut,
    AccountStats,
    AdminAccountCreateRequest,
    AdminAccountUpdateRequest,
    Pagination,
    ProfileUpdateRequest,
    RegisterRequest,
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

MAX_PAGE_SIZE = 100


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def validate_email(email: str) -> str:
    """Return the normalized email or raise ValidationError."""
    value = normalize_email(email or "")
    if not value:
        raise ValidationError("email: is required", code="email_required")
    if len(value) > EMAIL_MAX_LEN or not EMAIL_RE.match(value):
        raise ValidationError("email: invalid email format", code="email_invalid")
    return value


def validate_name(name: str) -> str:
    value = (name or "").strip()
    if len(value) < NAME_MIN_LEN:
        raise ValidationError(
            f"name: must be at least {NAME_MIN_LEN} characters", code="name_too_short"
        )
    if len(value) > NAME_MAX_LEN:
        raise ValidationError(
            f"name: must be at most {NAME_MAX_LEN} characters", code="name_too_long"
        )
    return value


def password_problems(password: str, require_complexity: bool = True) -> list[str]:
    """List every rule the password breaks; empty when it is acceptable."""
    problems: list[str] = []
    if len(password) < PASSWORD_MIN_LEN:
        problems.append(f"password: must be at least {PASSWORD_MIN_LEN} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        problems.append(f"password: must be at most {PASSWORD_MAX_BYTES} bytes")
    if require_complexity:
        if not any(c.islower() for c in password):
            problems.append("password: must contain a lowercase letter")
        if not any(c.isupper() for c in password):
            problems.append("password: must contain an uppercase letter")
        if not any(c.isdigit() for c in password):
            problems.append("password: must contain a digit")
    return problems


def validate_password(password: str, require_complexity: bool = True) -> str:
    problems = password_problems(password or "", require_complexity=require_complexity)
    if problems:
        raise ValidationError("; ".join(problems), code="weak_password", details=problems)
    return password


def _ensure_email_available(repo: AccountRepository, email: str, exclude_id: int | None = None) -> None:
    existing = repo.get_by_email(email)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(EMAIL_TAKEN_MESSAGE, code="email_taken")


# ---------------------------------------------------------------------------
# Public flows
# ---------------------------------------------------------------------------


def register_account(repo: AccountRepository, req: RegisterRequest) -> Account:
    """Create a regular account from a self-registration request."""
    name = validate_name(req.name)
    email = validate_email(req.email)
    validate_password(req.password, require_complexity=True)
    if req.password != req.confirm_password:
        raise ValidationError("confirm_password: passwords do not match", code="password_mismatch")
    _ensure_email_available(repo, email)

    account = repo.add(
        Account(
            name=name,
            email=email,
            password_hash=hash_password(req.password),
            role=Role.REGULAR,
        )
    )
    logger.info("Registered account id=%s", account.id)
    return account


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("cleantask-timing-equalizer")


def authenticate(repo: AccountRepository, email: str, password: str) -> tuple[str, Account]:
    """
    Verify credentials and issue an access token.

    Unknown email and wrong password raise the same AuthenticationError.
    """
    if not (email or "").strip() or not password:
        raise ValidationError("email and password are required", code="credentials_required")
    normalized = validate_email(email)

    account = repo.get_by_email(normalized)
    if account is None:
        # Spend the same hashing effort as a real check.
        verify_password(password, _dummy_hash())
        logger.info("Login failed: unknown email (domain=%s)", normalized.rsplit("@", 1)[-1])
        raise AuthenticationError(
            INVALID_CREDENTIALS_MESSAGE, code="invalid_credentials", reason="unknown_email"
        )
    if not verify_password(password, account.password_hash):
        logger.info("Login failed: wrong password for account id=%s", account.id)
        raise AuthenticationError(
            INVALID_CREDENTIALS_MESSAGE, code="invalid_credentials", reason="wrong_password"
        )

    token = create_access_token(sub=account.id, role=account.role)
    logger.info("Login succeeded: account id=%s role=%s", account.id, account.role.value)
    return token, account


# ---------------------------------------------------------------------------
# Profile (any authenticated account)
# ---------------------------------------------------------------------------


def get_account(repo: AccountRepository, account_id: int) -> Account:
    account = repo.get_by_id(account_id)
    if account is None:
        raise NotFoundError("Account not found", code="account_not_found")
    return account


def update_profile(repo: AccountRepository, ctx: AuthorizedContext, req: ProfileUpdateRequest) -> Account:
    """Change the caller's own name and/or password. Role and email are not editable here."""
    account = get_account(repo, ctx.subject_id)
    changed = False
    if req.name is not None:
        account.name = validate_name(req.name)
        changed = True
    if req.password is not None and req.password.strip():
        validate_password(req.password, require_complexity=False)
        account.password_hash = hash_password(req.password)
        changed = True
    if not changed:
        raise ValidationError("No changes to update", code="no_changes")
    account = repo.save(account)
    logger.info("Profile updated: account id=%s", account.id)
    return account


# ---------------------------------------------------------------------------
# Administration (admin only; callers pass an admin AuthorizedContext)
# ---------------------------------------------------------------------------


def list_accounts(
    repo: AccountRepository,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    role: Role | None = None,
) -> tuple[list[Account], Pagination]:
    if page < 1:
        raise ValidationError("page: must be at least 1", code="page_invalid")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit: must be between 1 and {MAX_PAGE_SIZE}", code="limit_invalid")
    items, total = repo.list_page(
        offset=(page - 1) * limit,
        limit=limit,
        search=search or None,
        role=role,
    )
    return items, Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if total else 0,
    )


def create_account(repo: AccountRepository, ctx: AuthorizedContext, req: AdminAccountCreateRequest) -> Account:
    name = validate_name(req.name)
    email = validate_email(req.email)
    validate_password(req.password, require_complexity=False)
    _ensure_email_available(repo, email)
    account = repo.add(
        Account(
            name=name,
            email=email,
            password_hash=hash_password(req.password),
            role=req.role,
        )
    )
    logger.info(
        "Admin id=%s created account id=%s role=%s", ctx.subject_id, account.id, account.role.value
    )
    return account


def update_account(
    repo: AccountRepository,
    ctx: AuthorizedContext,
    target_id: int,
    req: AdminAccountUpdateRequest,
) -> Account:
    account = get_account(repo, target_id)
    ensure_not_self_demotion(ctx, target_id, req.role)

    if req.name is not None:
        account.name = validate_name(req.name)
    if req.email is not None:
        email = validate_email(req.email)
        if email != account.email:
            _ensure_email_available(repo, email, exclude_id=account.id)
        account.email = email
    if req.password:
        validate_password(req.password, require_complexity=False)
        account.password_hash = hash_password(req.password)
    if req.role is not None:
        account.role = req.role

    account = repo.save(account)
    logger.info("Admin id=%s updated account id=%s", ctx.subject_id, account.id)
    return account


def change_role(
    repo: AccountRepository,
    ctx: AuthorizedContext,
    target_id: int,
    role: Role,
) -> tuple[Account, bool]:
    """Set the target's role. Returns (account, changed); unchanged roles are a no-op."""
    account = get_account(repo, target_id)
    ensure_not_self_demotion(ctx, target_id, role)
    if account.role is role:
        return account, False
    account.role = role
    account = repo.save(account)
    logger.info(
        "Admin id=%s changed role of account id=%s to %s", ctx.subject_id, account.id, role.value
    )
    return account, True


def delete_account(repo: AccountRepository, ctx: AuthorizedContext, target_id: int) -> AccountOut:
    """Delete the target account and return a snapshot of what was removed."""
    ensure_not_self_deletion(ctx, target_id)
    account = get_account(repo, target_id)
    snapshot = AccountOut.model_validate(account)
    repo.delete(account)
    logger.info("Admin id=%s deleted account id=%s", ctx.subject_id, target_id)
    return snapshot


def account_stats(repo: AccountRepository, now: datetime | None = None) -> AccountStats:
    """Account totals plus accounts created since the start of this month / week (UTC)."""
    now = now or datetime.now(UTC)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_of_month = start_of_day.replace(day=1)
    start_of_week = start_of_day - timedelta(days=start_of_day.weekday())

    total = repo.count()
    admins = repo.count(role=Role.ADMIN)
    return AccountStats(
        total=total,
        admins=admins,
        regular=total - admins,
        new_this_month=repo.count(created_since=start_of_month),
        new_this_week=repo.count(created_since=start_of_week),
    )
