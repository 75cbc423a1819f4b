"""Tests for app.services.roles: create, delete, system-role guard and seeding."""

import unittest
from unittest.mock import MagicMock, patch

from db_support import add_user, make_database

from app.models import Role, User
from app.services import roles
from app.services.errors import ConflictError, FormValidationError, ReservedRoleError


class RolesTestCase(unittest.TestCase):
    def setUp(self) -> None:
        rounds = patch("app.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)
        self.engine, self.factory = make_database()
        self.db = self.factory()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def role_names(self) -> list[str]:
        return [r.name for r in roles.list_roles(self.db)]


class TestCreateRole(RolesTestCase):
    def test_creates_lowercased_role_without_description(self) -> None:
        role = roles.create_role(self.db, "Editor")
        self.assertEqual(role.name, "editor")
        self.assertIsNone(role.description)
        self.assertEqual(self.role_names(), ["admin", "editor", "user"])

    def test_duplicate_after_normalization(self) -> None:
        roles.create_role(self.db, "editor")
        with self.assertRaises(ConflictError) as ctx:
            roles.create_role(self.db, "EDITOR")
        self.assertEqual(ctx.exception.errors, {"role": ["This role already exists"]})

    def test_empty_name(self) -> None:
        for raw in (None, "", "   "):
            with self.subTest(raw=raw):
                with self.assertRaises(FormValidationError) as ctx:
                    roles.create_role(self.db, raw)
                self.assertEqual(ctx.exception.errors, {"role": ["Role name is required"]})

    def test_name_too_long(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            roles.create_role(self.db, "r" * 65)
        self.assertEqual(ctx.exception.errors, {"role": ["Role name is too long"]})

    def test_concurrent_insert_reported_as_duplicate(self) -> None:
        roles.create_role(self.db, "editor")
        # Pre-check misses the row, so the unique index on roles.name rejects the insert.
        with patch.object(roles, "get_role", return_value=None):
            with self.assertRaises(ConflictError) as ctx:
                roles.create_role(self.db, "Editor")
        self.assertEqual(ctx.exception.errors, {"role": ["This role already exists"]})
        self.assertEqual(self.role_names(), ["admin", "editor", "user"])


class TestDeleteRole(RolesTestCase):
    def test_system_roles_never_deleted(self) -> None:
        for name in ("admin", "user", "Admin", "USER"):
            with self.subTest(name=name):
                with self.assertRaises(ReservedRoleError) as ctx:
                    roles.delete_role(self.db, name)
                self.assertEqual(ctx.exception.errors, {"role": ["Cannot delete system roles"]})
        self.assertEqual(self.role_names(), ["admin", "user"])

    def test_deletes_custom_role_case_insensitively(self) -> None:
        roles.create_role(self.db, "Editor")
        self.assertEqual(roles.delete_role(self.db, "Editor"), "editor")
        self.assertEqual(self.role_names(), ["admin", "user"])

    def test_unknown_role(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            roles.delete_role(self.db, "ghost")
        self.assertEqual(ctx.exception.errors, {"role": ["This role does not exist"]})

    def test_empty_name(self) -> None:
        with self.assertRaises(FormValidationError):
            roles.delete_role(self.db, "")

    def test_in_use_role_is_removed_from_users(self) -> None:
        roles.create_role(self.db, "editor")
        user = add_user(self.db, roles=["user", "editor"])
        roles.delete_role(self.db, "editor")
        reloaded = self.db.get(User, user.id)
        self.assertEqual(reloaded.role_names, ["user"])


class TestRoleScenario(RolesTestCase):
    """create editor, reject EDITOR, delete editor, refuse admin."""

    def test_scenario(self) -> None:
        roles.create_role(self.db, "editor")
        self.assertIsNotNone(roles.get_role(self.db, "editor"))
        with self.assertRaises(ConflictError):
            roles.create_role(self.db, "EDITOR")
        roles.delete_role(self.db, "editor")
        self.assertIsNone(roles.get_role(self.db, "editor"))
        with self.assertRaises(ReservedRoleError):
            roles.delete_role(self.db, "admin")


class TestSystemRoles(RolesTestCase):
    def test_seeding_is_idempotent(self) -> None:
        self.assertEqual(roles.ensure_system_roles(self.db), [])
        self.assertTrue(roles.system_roles_seeded(self.db))

    def test_seeds_missing_role(self) -> None:
        self.db.query(Role).filter(Role.name == "user").delete()
        self.db.commit()
        self.assertFalse(roles.system_roles_seeded(self.db))
        self.assertEqual(roles.ensure_system_roles(self.db), ["user"])
        self.assertTrue(roles.system_roles_seeded(self.db))


class TestResolveRoles(unittest.TestCase):
    """resolve_roles does not query when nothing is requested."""

    def test_empty_names_skip_query(self) -> None:
        session = MagicMock()
        self.assertEqual(roles.resolve_roles(session, []), [])
        session.query.assert_not_called()


if __name__ == "__main__":
    unittest.main()
