"""Shared fixtures: in-memory database, account factory and test client."""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cleantask.core.security import create_access_token, hash_password
from cleantask.models import Account, Base, Role
from cleantask.repositories.accounts import SqlAccountRepository


def make_sessionmaker() -> sessionmaker:
    """Fresh in-memory SQLite database with the schema created; one shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_account(
    repo: SqlAccountRepository,
    email: str,
    password: str = "Passw0rd!",
    role: Role = Role.REGULAR,
    name: str = "Test Account",
) -> Account:
    return repo.add(
        Account(name=name, email=email, password_hash=hash_password(password), role=role)
    )


def bearer(account: Account) -> dict[str, str]:
    """Authorization header carrying a fresh token for account."""
    token = create_access_token(sub=account.id, role=account.role)
    return {"Authorization": f"Bearer {token}"}


def override_get_db(factory: sessionmaker):
    def _get_db() -> Generator[Session, None, None]:
        db = factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db
