"""Models package exports."""

from groov.models.auth import (
    LoginRequest,
    RefreshResponse,
    SignupRequest,
    TokenClaims,
    TokenPair,
    UserSummary,
)
from groov.models.user import RefreshToken, Role, User

__all__ = [
    "LoginRequest",
    "RefreshResponse",
    "RefreshToken",
    "Role",
    "SignupRequest",
    "TokenClaims",
    "TokenPair",
    "User",
    "UserSummary",
]
