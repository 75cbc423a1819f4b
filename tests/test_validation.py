"""Unit tests for the create/edit form schemas and error flattening."""

import unittest

from app.schemas.admin import UserCreateForm, UserEditForm
from app.services.errors import FormValidationError
from app.services.validation import validate_form


def _create_payload(**overrides: object) -> dict:
    data = {
        "email": "A@B.com",
        "username": "Bob",
        "password": "validpass123",
        "name": "Bob B",
        "roles": ["user"],
    }
    data.update(overrides)
    return data


class TestUserCreateForm(unittest.TestCase):
    """validate_form(UserCreateForm, ...) accepts good input and reports per-field errors."""

    def test_valid_payload_is_not_case_folded(self) -> None:
        form = validate_form(UserCreateForm, _create_payload())
        self.assertEqual(form.email, "A@B.com")
        self.assertEqual(form.username, "Bob")
        self.assertEqual(form.roles, ["user"])

    def test_roles_default_to_user_when_omitted(self) -> None:
        data = _create_payload()
        del data["roles"]
        form = validate_form(UserCreateForm, data)
        self.assertEqual(form.roles, ["user"])

    def test_empty_roles_list_is_kept(self) -> None:
        form = validate_form(UserCreateForm, _create_payload(roles=[]))
        self.assertEqual(form.roles, [])

    def test_empty_name(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            validate_form(UserCreateForm, _create_payload(name=""))
        self.assertEqual(ctx.exception.errors, {"name": ["Name is required"]})

    def test_invalid_email(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            validate_form(UserCreateForm, _create_payload(email="not-an-email"))
        self.assertEqual(ctx.exception.errors["email"], ["Email is invalid"])

    def test_username_rules(self) -> None:
        cases = {
            "ab": "Username is too short",
            "a" * 21: "Username is too long",
            "bob smith": "Username can only include letters, numbers, and underscores",
        }
        for username, message in cases.items():
            with self.subTest(username=username):
                with self.assertRaises(FormValidationError) as ctx:
                    validate_form(UserCreateForm, _create_payload(username=username))
                self.assertEqual(ctx.exception.errors["username"], [message])

    def test_username_with_trailing_newline_rejected(self) -> None:
        for username in ("bob\n", "bob\r\n", "\nbob"):
            with self.subTest(username=username):
                with self.assertRaises(FormValidationError) as ctx:
                    validate_form(UserCreateForm, _create_payload(username=username))
                self.assertEqual(
                    ctx.exception.errors["username"],
                    ["Username can only include letters, numbers, and underscores"],
                )

    def test_password_length(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            validate_form(UserCreateForm, _create_payload(password="short"))
        self.assertEqual(ctx.exception.errors["password"], ["Password is too short"])
        with self.assertRaises(FormValidationError) as ctx:
            validate_form(UserCreateForm, _create_payload(password="x" * 129))
        self.assertEqual(ctx.exception.errors["password"], ["Password is too long"])

    def test_missing_fields_are_reported_together(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            validate_form(UserCreateForm, {"name": "Only Name"})
        errors = ctx.exception.errors
        self.assertEqual(errors["email"], ["Email is required"])
        self.assertEqual(errors["username"], ["Username is required"])
        self.assertEqual(errors["password"], ["Password is required"])
        self.assertNotIn("name", errors)

    def test_role_item_errors_map_to_roles_field(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            validate_form(UserCreateForm, _create_payload(roles=["user", 5]))
        self.assertIn("roles", ctx.exception.errors)
        self.assertEqual(ctx.exception.status_code, 400)


class TestUserEditForm(unittest.TestCase):
    """The edit form has no password field."""

    def test_password_not_required(self) -> None:
        form = validate_form(
            UserEditForm,
            {"email": "e@steward.io", "username": "eve", "name": "Eve", "roles": ["admin"]},
        )
        self.assertEqual(form.roles, ["admin"])
        self.assertFalse(hasattr(form, "password"))

    def test_extra_fields_ignored(self) -> None:
        form = validate_form(
            UserEditForm,
            {"email": "e@steward.io", "username": "eve", "name": "Eve", "intent": "x"},
        )
        self.assertEqual(form.roles, ["user"])


if __name__ == "__main__":
    unittest.main()
