"""Auth request, response, and token models with validation."""

import re

from pydantic import BaseModel, Field, field_validator

from groov.models.user import Role, User

# bcrypt only considers the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_.-]+")


def _check_password_length(v: str) -> str:
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


class SignupRequest(BaseModel):
    """New account credentials.

    Attributes:
        username: Unique identifier (3-100 chars, alphanumeric + . _ -)
        password: Plain-text password (1-72 bytes, not whitespace only)
    """

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def username_valid_chars(cls, v: str) -> str:
        """Ensure username contains only alphanumeric, dot, underscore, or hyphen."""
        if not USERNAME_PATTERN.fullmatch(v):
            raise ValueError(
                "Username must contain only alphanumeric characters, "
                "dots, underscores, or hyphens"
            )
        return v

    @field_validator("password")
    @classmethod
    def password_valid(cls, v: str) -> str:
        """Ensure password is not whitespace only and fits bcrypt's input limit."""
        if not v.strip():
            raise ValueError("Password cannot be empty or whitespace only")
        return _check_password_length(v)


class LoginRequest(BaseModel):
    """Login credentials.

    Only presence and size are checked here; anything else is reported as
    invalid credentials by the session service.
    """

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits(cls, v: str) -> str:
        return _check_password_length(v)


class TokenClaims(BaseModel):
    """Identity carried inside access and refresh tokens."""

    id: int
    role: Role


class TokenPair(BaseModel):
    """Tokens issued by a successful login."""

    access_token: str
    refresh_token: str


class RefreshResponse(BaseModel):
    """Body returned by POST /auth/refresh."""

    newAccessToken: str


class UserSummary(BaseModel):
    """Public user representation for API responses."""

    id: int
    username: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(id=user.id, username=user.username, role=user.role)
