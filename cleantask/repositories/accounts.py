"""Account persistence: the repository protocol and its SQLAlchemy implementation."""

from datetime import datetime
from typing import Protocol

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cleantask.core.errors import ConflictError
from cleantask.models.account import Account, Role

EMAIL_TAKEN_MESSAGE = "An account with this email already exists"

# How the email unique index shows up in driver messages (PostgreSQL, SQLite).
EMAIL_CONSTRAINT_MARKERS = ("ix_accounts_email", "accounts.email")


def normalize_email(email: str) -> str:
    """Emails are compared and stored lower-cased."""
    return email.strip().lower()


def is_email_conflict(error: IntegrityError) -> bool:
    """True when the violated constraint is the unique index on accounts.email."""
    message = str(error.orig)
    return "UNIQUE" in message.upper() and any(m in message for m in EMAIL_CONSTRAINT_MARKERS)


class AccountRepository(Protocol):
    """Operations the account services need from the store."""

    def get_by_id(self, account_id: int) -> Account | None: ...

    def get_by_email(self, email: str) -> Account | None: ...

    def list_page(
        self,
        *,
        offset: int,
        limit: int,
        search: str | None = None,
        role: Role | None = None,
    ) -> tuple[list[Account], int]: ...

    def add(self, account: Account) -> Account: ...

    def save(self, account: Account) -> Account: ...

    def delete(self, account: Account) -> None: ...

    def count(self, *, role: Role | None = None, created_since: datetime | None = None) -> int: ...


class SqlAccountRepository:
    """AccountRepository over a SQLAlchemy session. Commits on every mutation."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_id(self, account_id: int) -> Account | None:
        return self.db.query(Account).filter(Account.id == account_id).first()

    def get_by_email(self, email: str) -> Account | None:
        return (
            self.db.query(Account)
            .filter(func.lower(Account.email) == normalize_email(email))
            .first()
        )

    def list_page(
        self,
        *,
        offset: int,
        limit: int,
        search: str | None = None,
        role: Role | None = None,
    ) -> tuple[list[Account], int]:
        query = self.db.query(Account)
        if search:
            term = search.strip().lower()
            # autoescape: % and _ in the term match literally.
            query = query.filter(
                or_(
                    func.lower(Account.name).contains(term, autoescape=True),
                    func.lower(Account.email).contains(term, autoescape=True),
                )
            )
        if role is not None:
            query = query.filter(Account.role == role)
        total = query.count()
        items = (
            query.order_by(Account.created_at.desc(), Account.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def add(self, account: Account) -> Account:
        account.email = normalize_email(account.email)
        self.db.add(account)
        self._commit()
        self.db.refresh(account)
        return account

    def save(self, account: Account) -> Account:
        account.email = normalize_email(account.email)
        self._commit()
        self.db.refresh(account)
        return account

    def delete(self, account: Account) -> None:
        self.db.delete(account)
        self.db.commit()

    def count(self, *, role: Role | None = None, created_since: datetime | None = None) -> int:
        query = self.db.query(Account)
        if role is not None:
            query = query.filter(Account.role == role)
        if created_since is not None:
            query = query.filter(Account.created_at >= created_since)
        return query.count()

    def _commit(self) -> None:
        # Unique index on email is the final arbiter for concurrent registrations.
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_email_conflict(e):
                raise ConflictError(EMAIL_TAKEN_MESSAGE, code="email_taken") from e
            raise
