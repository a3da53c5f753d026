"""
Seed the default admin and demo accounts if they do not exist yet:

  python -m cleantask.scripts.seed --admin-password '...' --user-password '...'

Both passwords are required; there are no built-in defaults.
"""
import argparse
import logging
import sys

from cleantask.core.config import settings
from cleantask.core.database import SessionLocal
from cleantask.core.logging import configure_logging
from cleantask.core.security import hash_password
from cleantask.models.account import Account, Role
from cleantask.repositories.accounts import AccountRepository, SqlAccountRepository

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@cleantask.com"
DEFAULT_USER_EMAIL = "user@cleantask.com"


def seed_accounts(repo: AccountRepository, admin_password: str, user_password: str) -> list[Account]:
    """Create the default accounts that are missing. Returns the ones created."""
    wanted = [
        ("Administrador", DEFAULT_ADMIN_EMAIL, admin_password, Role.ADMIN),
        ("Usuario Demo", DEFAULT_USER_EMAIL, user_password, Role.REGULAR),
    ]
    created: list[Account] = []
    for name, email, password, role in wanted:
        if repo.get_by_email(email) is not None:
            logger.info("Seed: %s already exists, skipping", email)
            continue
        account = repo.add(
            Account(name=name, email=email, password_hash=hash_password(password), role=role)
        )
        logger.info("Seed: created %s (role=%s)", email, role.value)
        created.append(account)
    return created


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed default CleanTask accounts.")
    parser.add_argument("--admin-password", required=True, help=f"Password for {DEFAULT_ADMIN_EMAIL}")
    parser.add_argument("--user-password", required=True, help=f"Password for {DEFAULT_USER_EMAIL}")
    args = parser.parse_args(argv)
    configure_logging(settings.LOG_LEVEL)

    db = SessionLocal()
    try:
        created = seed_accounts(SqlAccountRepository(db), args.admin_password, args.user_password)
        logger.info("Seed completed: accounts_created=%s", len(created))
        return 0
    except Exception as e:
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
