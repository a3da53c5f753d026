"""
Create an account (e.g. the first admin). Run from project root:
  python -m cleantask.scripts.create_user EMAIL NAME PASSWORD [role]
Example:
  python -m cleantask.scripts.create_user admin@example.com "Site Admin" 'S3cure-pass' admin
"""
import argparse
import logging
import sys

from cleantask.core.authz import AuthorizedContext
from cleantask.core.config import settings
from cleantask.core.database import SessionLocal
from cleantask.core.errors import CleanTaskError
from cleantask.core.logging import configure_logging
from cleantask.models.account import Role
from cleantask.repositories.accounts import SqlAccountRepository
from cleantask.schemas.account import AdminAccountCreateRequest
from cleantask.services.accounts import create_account

logger = logging.getLogger(__name__)

# Accounts created from the command line are attributed to this pseudo-admin in logs.
CLI_CONTEXT = AuthorizedContext(subject_id=0, role=Role.ADMIN)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a CleanTask account.")
    parser.add_argument("email", help="Email (unique, case-insensitive)")
    parser.add_argument("name", help="Display name (2-100 chars)")
    parser.add_argument("password", help="Password (8 chars to 72 bytes)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.REGULAR.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)
    configure_logging(settings.LOG_LEVEL)

    db = SessionLocal()
    try:
        repo = SqlAccountRepository(db)
        account = create_account(
            repo,
            CLI_CONTEXT,
            AdminAccountCreateRequest(
                name=args.name,
                email=args.email,
                password=args.password,
                role=Role(args.role),
            ),
        )
        print(f"Created account '{account.email}' with role '{account.role.value}'.")
        return 0
    except CleanTaskError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
