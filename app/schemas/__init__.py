"""Pydantic request/response schemas."""

from app.schemas.admin import (
    EditUserPageResponse,
    FieldErrorsResponse,
    IntentSuccessResponse,
    NewUserPageResponse,
    RoleOption,
    UserCreatedResponse,
    UserCreateForm,
    UserDetail,
    UserEditForm,
    UsersListResponse,
    UserSummary,
)
from app.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from app.schemas.health import HealthResponse

__all__ = [
    "CurrentUser",
    "EditUserPageResponse",
    "FieldErrorsResponse",
    "HealthResponse",
    "IntentSuccessResponse",
    "LoginRequest",
    "NewUserPageResponse",
    "RoleOption",
    "TokenResponse",
    "UserCreatedResponse",
    "UserCreateForm",
    "UserDetail",
    "UserEditForm",
    "UsersListResponse",
    "UserSummary",
]
