"""User and refresh-token models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    """Coarse authorization tag carried in token claims."""

    ADMIN = "admin"
    USER = "user"


class User(BaseModel):
    """A registered user. Never carries the password hash."""

    id: int
    username: str
    role: Role = Role.USER
    deleted: bool = False


class RefreshToken(BaseModel):
    """A persisted refresh token bound to a user."""

    id: int
    user_id: int
    token: str
    created_at: datetime
    expires_at: datetime
