"""Form and response schemas for the user/role admin console."""

import re
from datetime import datetime
from typing import Literal

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from app.core.security import (
    EMAIL_MAX_LEN,
    EMAIL_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    USERNAME_PATTERN,
)

# Role pre-selected for new accounts and applied when a submission omits roles entirely.
DEFAULT_ROLE = "user"

_USERNAME_RE = re.compile(USERNAME_PATTERN)


class _AccountFields(BaseModel):
    """Profile fields shared by the create and edit forms."""

    model_config = ConfigDict(extra="ignore")

    email: str
    username: str
    name: str
    roles: list[str] = Field(default_factory=lambda: [DEFAULT_ROLE])

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError("email_invalid", "Email is invalid")
        if len(v) < EMAIL_MIN_LEN:
            raise PydanticCustomError("email_too_short", "Email is too short")
        if len(v) > EMAIL_MAX_LEN:
            raise PydanticCustomError("email_too_long", "Email is too long")
        return v

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if len(v) < USERNAME_MIN_LEN:
            raise PydanticCustomError("username_too_short", "Username is too short")
        if len(v) > USERNAME_MAX_LEN:
            raise PydanticCustomError("username_too_long", "Username is too long")
        if not _USERNAME_RE.fullmatch(v):
            raise PydanticCustomError(
                "username_invalid",
                "Username can only include letters, numbers, and underscores",
            )
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if len(v) < 1:
            raise PydanticCustomError("name_required", "Name is required")
        return v


class UserCreateForm(_AccountFields):
    """Fields accepted by the create-user intent."""

    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < PASSWORD_MIN_LEN:
            raise PydanticCustomError("password_too_short", "Password is too short")
        if len(v) > PASSWORD_MAX_LEN:
            raise PydanticCustomError("password_too_long", "Password is too long")
        return v


class UserEditForm(_AccountFields):
    """Fields accepted when editing a user. Password changes are not handled here."""


class RoleOption(BaseModel):
    """Role entry offered for selection."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str | None = None


class UserSummary(BaseModel):
    """User row for the admin listing (no credential data)."""

    id: int
    email: str
    username: str
    name: str
    roles: list[str]
    created_at: datetime


class UsersListResponse(BaseModel):
    """Response for GET /admin/users."""

    users: list[UserSummary]


class UserDetail(BaseModel):
    """User fields prefilled in the edit form."""

    id: int
    email: str
    username: str
    name: str
    roles: list[str]


class NewUserPageResponse(BaseModel):
    """Data for the add-user form: selectable roles and the ones pre-checked."""

    available_roles: list[RoleOption]
    default_roles: list[str] = Field(default_factory=lambda: [DEFAULT_ROLE])


class EditUserPageResponse(BaseModel):
    """Data for the edit-user form."""

    user: UserDetail
    available_roles: list[RoleOption]


class FieldErrorsResponse(BaseModel):
    """Field-scoped errors for a rejected submission; only the first message per field is shown."""

    errors: dict[str, list[str]]
    status: Literal[400] = 400


class IntentSuccessResponse(BaseModel):
    """Result of a role intent, so the client can reset the matching sub-form."""

    status: Literal["success"] = "success"
    form_type: Literal["role", "delete-role"] = Field(serialization_alias="formType")


class UserCreatedResponse(BaseModel):
    """Confirmation shown after a user has been created."""

    message: str
    links: dict[str, str]
