"""Errors raised by admin operations and rendered as field-scoped responses."""


class AdminFormError(Exception):
    """
    Base for failures reported against named form fields.

    errors maps field name -> ordered list of messages. status_code is the HTTP
    status the route responds with.
    """

    status_code = 400

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        super().__init__(errors)

    @classmethod
    def for_field(cls, field: str, message: str) -> "AdminFormError":
        return cls({field: [message]})


class FormValidationError(AdminFormError):
    """Submitted fields failed the schema (shape, length, format)."""


class ConflictError(AdminFormError):
    """A unique value (email, username, role name) is already in use."""


class ReservedRoleError(AdminFormError):
    """Attempt to delete a system role."""


class NotFoundError(Exception):
    """The requested record does not exist."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
