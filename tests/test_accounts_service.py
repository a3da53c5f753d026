"""Tests for cleantask.services.accounts against an in-memory SQLite database."""

import unittest
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import IntegrityError

from cleantask.core.authz import AuthorizedContext
from cleantask.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from cleantask.core.security import decode_access_token, verify_password
from cleantask.models import Account, Role
from cleantask.repositories.accounts import SqlAccountRepository
from cleantask.schemas.account import (
    AccountOut,
    AdminAccountCreateRequest,
    AdminAccountUpdateRequest,
    ProfileUpdateRequest,
    RegisterRequest,
)
from cleantask.scripts.seed import DEFAULT_ADMIN_EMAIL, seed_accounts
from cleantask.scripts.seed import main as seed_main
from cleantask.services import accounts as svc
from tests.helpers import make_account, make_sessionmaker


def _register(**overrides: str) -> RegisterRequest:
    data = {
        "name": "Maria Garcia",
        "email": "maria@example.com",
        "password": "Abcdefgh1",
        "confirm_password": "Abcdefgh1",
    }
    data.update(overrides)
    return RegisterRequest(**data)


class AccountServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_sessionmaker()()
        self.repo = SqlAccountRepository(self.db)
        self.admin = make_account(self.repo, "admin@cleantask.com", "AdminPass123", Role.ADMIN, "Admin")
        self.user = make_account(self.repo, "user@cleantask.com", "UserPass123", Role.REGULAR, "User")
        self.admin_ctx = AuthorizedContext(subject_id=self.admin.id, role=Role.ADMIN)

    def tearDown(self) -> None:
        self.db.close()


class TestRegistration(AccountServiceTestCase):
    def test_valid_registration_creates_regular_account(self) -> None:
        account = svc.register_account(self.repo, _register())
        self.assertIsNotNone(account.id)
        self.assertIs(account.role, Role.REGULAR)
        self.assertNotEqual(account.password_hash, "Abcdefgh1")
        self.assertTrue(verify_password("Abcdefgh1", account.password_hash))

    def test_password_over_72_bytes_is_rejected(self) -> None:
        long_password = "Abcdefgh1" + "x" * 64
        with self.assertRaises(ValidationError) as cm:
            svc.register_account(
                self.repo, _register(password=long_password, confirm_password=long_password)
            )
        self.assertIn("password: must be at most 72 bytes", cm.exception.details)

    def test_short_password_lists_minimum_length(self) -> None:
        with self.assertRaises(ValidationError) as cm:
            svc.register_account(self.repo, _register(password="abc", confirm_password="abc"))
        self.assertIn("password: must be at least 8 characters", cm.exception.details)

    def test_password_needs_upper_lower_and_digit(self) -> None:
        with self.assertRaises(ValidationError) as cm:
            svc.register_account(
                self.repo, _register(password="abcdefghij", confirm_password="abcdefghij")
            )
        self.assertIn("password: must contain an uppercase letter", cm.exception.details)
        self.assertIn("password: must contain a digit", cm.exception.details)

    def test_password_confirmation_must_match(self) -> None:
        with self.assertRaises(ValidationError) as cm:
            svc.register_account(self.repo, _register(confirm_password="Abcdefgh2"))
        self.assertEqual(cm.exception.code, "password_mismatch")

    def test_invalid_email_format(self) -> None:
        with self.assertRaises(ValidationError) as cm:
            svc.register_account(self.repo, _register(email="maria@example"))
        self.assertEqual(cm.exception.code, "email_invalid")

    def test_email_taken_case_insensitive(self) -> None:
        with self.assertRaises(ConflictError):
            svc.register_account(self.repo, _register(email="USER@CleanTask.com"))

    def test_email_is_stored_lower_cased(self) -> None:
        account = svc.register_account(self.repo, _register(email="Maria@Example.COM"))
        self.assertEqual(account.email, "maria@example.com")


class TestAuthenticate(AccountServiceTestCase):
    def test_correct_credentials_issue_token_with_role(self) -> None:
        token, account = svc.authenticate(self.repo, "admin@cleantask.com", "AdminPass123")
        self.assertEqual(account.id, self.admin.id)
        claims = decode_access_token(token)
        self.assertEqual(claims.subject_id, self.admin.id)
        self.assertIs(claims.role, Role.ADMIN)

    def test_email_lookup_ignores_case(self) -> None:
        _, account = svc.authenticate(self.repo, "Admin@CleanTask.com", "AdminPass123")
        self.assertEqual(account.id, self.admin.id)

    def test_wrong_password_and_unknown_email_look_identical(self) -> None:
        with self.assertRaises(AuthenticationError) as wrong:
            svc.authenticate(self.repo, "admin@cleantask.com", "nope")
        with self.assertRaises(AuthenticationError) as unknown:
            svc.authenticate(self.repo, "ghost@cleantask.com", "nope")
        self.assertEqual(wrong.exception.message, unknown.exception.message)
        self.assertEqual(wrong.exception.code, unknown.exception.code)
        self.assertEqual(wrong.exception.reason, "wrong_password")
        self.assertEqual(unknown.exception.reason, "unknown_email")

    def test_missing_fields(self) -> None:
        with self.assertRaises(ValidationError):
            svc.authenticate(self.repo, "", "AdminPass123")
        with self.assertRaises(ValidationError):
            svc.authenticate(self.repo, "admin@cleantask.com", "")


class TestProfile(AccountServiceTestCase):
    def test_update_name_and_password(self) -> None:
        ctx = AuthorizedContext(subject_id=self.user.id, role=Role.REGULAR)
        account = svc.update_profile(
            self.repo, ctx, ProfileUpdateRequest(name="  New Name ", password="another-pass")
        )
        self.assertEqual(account.name, "New Name")
        self.assertTrue(verify_password("another-pass", account.password_hash))

    def test_nothing_to_update(self) -> None:
        ctx = AuthorizedContext(subject_id=self.user.id, role=Role.REGULAR)
        with self.assertRaises(ValidationError) as cm:
            svc.update_profile(self.repo, ctx, ProfileUpdateRequest())
        self.assertEqual(cm.exception.code, "no_changes")

    def test_short_name_rejected(self) -> None:
        ctx = AuthorizedContext(subject_id=self.user.id, role=Role.REGULAR)
        with self.assertRaises(ValidationError):
            svc.update_profile(self.repo, ctx, ProfileUpdateRequest(name="A"))

    def test_deleted_account_is_not_found(self) -> None:
        ctx = AuthorizedContext(subject_id=9999, role=Role.REGULAR)
        with self.assertRaises(NotFoundError):
            svc.get_account(self.repo, ctx.subject_id)


class TestAdministration(AccountServiceTestCase):
    def test_promote_other_account(self) -> None:
        account, changed = svc.change_role(self.repo, self.admin_ctx, self.user.id, Role.ADMIN)
        self.assertTrue(changed)
        self.assertIs(account.role, Role.ADMIN)

    def test_same_role_is_a_no_op(self) -> None:
        account, changed = svc.change_role(self.repo, self.admin_ctx, self.user.id, Role.REGULAR)
        self.assertFalse(changed)
        self.assertIs(account.role, Role.REGULAR)

    def test_self_demotion_forbidden_via_role_endpoint(self) -> None:
        with self.assertRaises(AuthorizationError):
            svc.change_role(self.repo, self.admin_ctx, self.admin.id, Role.REGULAR)
        self.db.refresh(self.admin)
        self.assertIs(self.admin.role, Role.ADMIN)

    def test_self_demotion_forbidden_via_general_update(self) -> None:
        with self.assertRaises(AuthorizationError):
            svc.update_account(
                self.repo,
                self.admin_ctx,
                self.admin.id,
                AdminAccountUpdateRequest(name="Still Admin", role=Role.REGULAR),
            )

    def test_change_role_of_missing_account(self) -> None:
        with self.assertRaises(NotFoundError):
            svc.change_role(self.repo, self.admin_ctx, 9999, Role.ADMIN)

    def test_self_deletion_forbidden(self) -> None:
        with self.assertRaises(AuthorizationError):
            svc.delete_account(self.repo, self.admin_ctx, self.admin.id)
        self.assertIsNotNone(self.repo.get_by_id(self.admin.id))

    def test_delete_other_account(self) -> None:
        user_id = self.user.id
        snapshot = svc.delete_account(self.repo, self.admin_ctx, user_id)
        self.assertEqual(snapshot.id, user_id)
        self.assertEqual(snapshot.email, "user@cleantask.com")
        self.assertIsNone(self.repo.get_by_id(user_id))

    def test_delete_missing_account(self) -> None:
        with self.assertRaises(NotFoundError):
            svc.delete_account(self.repo, self.admin_ctx, 9999)

    def test_create_account_with_role(self) -> None:
        account = svc.create_account(
            self.repo,
            self.admin_ctx,
            AdminAccountCreateRequest(
                name="Second Admin", email="boss@cleantask.com", password="longenough", role=Role.ADMIN
            ),
        )
        self.assertIs(account.role, Role.ADMIN)

    def test_create_account_duplicate_email(self) -> None:
        with self.assertRaises(ConflictError):
            svc.create_account(
                self.repo,
                self.admin_ctx,
                AdminAccountCreateRequest(name="Dup", email="user@cleantask.com", password="longenough"),
            )

    def test_update_email_to_taken_address(self) -> None:
        with self.assertRaises(ConflictError):
            svc.update_account(
                self.repo,
                self.admin_ctx,
                self.user.id,
                AdminAccountUpdateRequest(email="ADMIN@cleantask.com"),
            )

    def test_update_own_email_unchanged_is_allowed(self) -> None:
        account = svc.update_account(
            self.repo,
            self.admin_ctx,
            self.user.id,
            AdminAccountUpdateRequest(email="User@CleanTask.com", name="Renamed"),
        )
        self.assertEqual(account.name, "Renamed")
        self.assertEqual(account.email, "user@cleantask.com")

    def test_list_with_search_and_pagination(self) -> None:
        for i in range(3):
            make_account(self.repo, f"extra{i}@example.com", name=f"Extra {i}")
        items, pagination = svc.list_accounts(self.repo, page=1, limit=2, search="EXTRA")
        self.assertEqual(len(items), 2)
        self.assertEqual(pagination.total, 3)
        self.assertEqual(pagination.total_pages, 2)

    def test_list_by_role(self) -> None:
        items, pagination = svc.list_accounts(self.repo, role=Role.ADMIN)
        self.assertEqual([a.id for a in items], [self.admin.id])
        self.assertEqual(pagination.total, 1)

    def test_list_rejects_bad_paging(self) -> None:
        with self.assertRaises(ValidationError):
            svc.list_accounts(self.repo, page=0)
        with self.assertRaises(ValidationError):
            svc.list_accounts(self.repo, limit=svc.MAX_PAGE_SIZE + 1)

    def test_search_treats_wildcards_literally(self) -> None:
        for term in ("_", "%", "\\"):
            _, pagination = svc.list_accounts(self.repo, search=term)
            self.assertEqual(pagination.total, 0, term)
        make_account(self.repo, "snake@example.com", name="snake_case")
        items, pagination = svc.list_accounts(self.repo, search="_")
        self.assertEqual(pagination.total, 1)
        self.assertEqual(items[0].email, "snake@example.com")


class TestAccountStats(unittest.TestCase):
    """Windows are computed from a fixed `now`: Wednesday 2026-10-21 12:00 UTC."""

    now = datetime(2026, 10, 21, 12, 0, tzinfo=UTC)

    def setUp(self) -> None:
        self.db = make_sessionmaker()()
        self.repo = SqlAccountRepository(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def _dated(self, email: str, created_at: datetime, role: Role = Role.REGULAR) -> Account:
        return self.repo.add(
            Account(
                name="Dated Account",
                email=email,
                password_hash="x",
                role=role,
                created_at=created_at,
                updated_at=created_at,
            )
        )

    def test_windows_exclude_older_accounts(self) -> None:
        self._dated("tuesday@example.com", datetime(2026, 10, 20, 9, 0, tzinfo=UTC))
        self._dated("monday-midnight@example.com", datetime(2026, 10, 19, 0, 0, tzinfo=UTC))
        self._dated("eight-days@example.com", self.now - timedelta(days=8))
        self._dated("forty-days@example.com", self.now - timedelta(days=40))
        self._dated("first-of-month@example.com", datetime(2026, 10, 1, 0, 0, tzinfo=UTC), Role.ADMIN)

        stats = svc.account_stats(self.repo, now=self.now)
        self.assertEqual(stats.total, 5)
        self.assertEqual(stats.admins, 1)
        self.assertEqual(stats.regular, 4)
        self.assertEqual(stats.new_this_week, 2)
        self.assertEqual(stats.new_this_month, 4)

    def test_no_accounts(self) -> None:
        stats = svc.account_stats(self.repo, now=self.now)
        self.assertEqual((stats.total, stats.new_this_week, stats.new_this_month), (0, 0, 0))


class TestSqlAccountRepository(AccountServiceTestCase):
    def test_duplicate_email_insert_is_conflict(self) -> None:
        with self.assertRaises(ConflictError) as cm:
            self.repo.add(Account(name="Dup", email="USER@cleantask.com", password_hash="x"))
        self.assertEqual(cm.exception.code, "email_taken")

    def test_other_integrity_errors_are_not_reported_as_email_taken(self) -> None:
        with self.assertRaises(IntegrityError):
            self.repo.add(Account(name=None, email="nameless@example.com", password_hash="x"))
        # Session was rolled back and stays usable.
        self.assertIsNotNone(self.repo.get_by_email("user@cleantask.com"))


class TestSeed(unittest.TestCase):
    def test_seed_is_idempotent(self) -> None:
        db = make_sessionmaker()()
        try:
            repo = SqlAccountRepository(db)
            created = seed_accounts(repo, "AdminPass123", "UserPass123")
            self.assertEqual(len(created), 2)
            self.assertEqual(seed_accounts(repo, "AdminPass123", "UserPass123"), [])
            self.assertIs(repo.get_by_email(DEFAULT_ADMIN_EMAIL).role, Role.ADMIN)
        finally:
            db.close()

    def test_cli_requires_both_passwords(self) -> None:
        with self.assertRaises(SystemExit):
            seed_main([])
        with self.assertRaises(SystemExit):
            seed_main(["--admin-password", "AdminPass123"])


class TestAccountOut(AccountServiceTestCase):
    def test_reads_orm_attributes(self) -> None:
        self.assertTrue(AccountOut.model_config["from_attributes"])
        out = AccountOut.model_validate(self.user)
        self.assertEqual(out.email, "user@cleantask.com")
        self.assertIs(out.role, Role.REGULAR)


if __name__ == "__main__":
    unittest.main()
