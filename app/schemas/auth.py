"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN


class LoginRequest(BaseModel):
    """Credentials for login. Username matching is case-insensitive."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role names) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    roles: list[str] = Field(default_factory=list)

    def has_role(self, role_name: str) -> bool:
        return role_name in self.roles
