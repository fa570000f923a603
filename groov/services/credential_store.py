"""Persistence for users and refresh tokens."""

from datetime import datetime, timezone
from typing import Optional, Protocol

import asyncpg
import structlog

from groov.exceptions import Conflict
from groov.models.user import RefreshToken, Role, User

logger = structlog.get_logger(__name__)


class CredentialStore(Protocol):
    """Narrow storage interface consumed by the session service.

    Every operation is a single-row statement; none needs a transaction.
    """

    async def find_user_by_username(self, username: str) -> Optional[tuple[User, str]]:
        """Return (user, password_hash), including soft-deleted users."""
        ...

    async def find_user_by_id(self, user_id: int) -> Optional[User]:
        ...

    async def insert_user(self, username: str, password_hash: str, role: Role) -> User:
        """Raises Conflict if the username is taken."""
        ...

    async def insert_refresh_token(
        self, token: str, user_id: int, expires_at: datetime
    ) -> RefreshToken:
        ...

    async def find_user_id_by_refresh_token(self, token: str) -> Optional[int]:
        """Return the owner of a live (unexpired) refresh token."""
        ...

    async def delete_refresh_token(self, token: str) -> bool:
        """Return True if a row was removed."""
        ...


def _user_from_row(row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        role=Role(row["role"]),
        deleted=row["deleted"],
    )


class PostgresCredentialStore:
    """asyncpg implementation of CredentialStore over app_user / refresh_token."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def find_user_by_username(self, username: str) -> Optional[tuple[User, str]]:
        """Get a user by exact username.

        Args:
            username: Username to look up

        Returns:
            Tuple of (User, password_hash) or None if not found
        """
        if not username:
            return None

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, username, password, role, deleted
                FROM app_user
                WHERE username = $1
                """,
                username,
            )

        if row is None:
            return None

        return _user_from_row(row), row["password"]

    async def find_user_by_id(self, user_id: int) -> Optional[User]:
        """Get a user by id.

        Args:
            user_id: User primary key

        Returns:
            User model or None if not found
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, username, role, deleted
                FROM app_user
                WHERE id = $1
                """,
                user_id,
            )

        if row is None:
            return None

        return _user_from_row(row)

    async def insert_user(self, username: str, password_hash: str, role: Role) -> User:
        """Insert a new, non-deleted user.

        Args:
            username: Unique username
            password_hash: Bcrypt hash of the password
            role: Role to assign

        Returns:
            Created User model

        Raises:
            Conflict: If the username already exists
        """
        try:
            async with self.pool.acquire() as conn:
                user_id = await conn.fetchval(
                    """
                    INSERT INTO app_user (username, password, role, deleted)
                    VALUES ($1, $2, $3, FALSE)
                    RETURNING id
                    """,
                    username,
                    password_hash,
                    role.value,
                )
        except asyncpg.exceptions.UniqueViolationError:
            raise Conflict("Username already exists")

        logger.info("user_inserted", user_id=user_id, username=username, role=role.value)

        return User(id=user_id, username=username, role=role, deleted=False)

    async def insert_refresh_token(
        self, token: str, user_id: int, expires_at: datetime
    ) -> RefreshToken:
        """Persist a refresh token for a user.

        Args:
            token: The bearer string
            user_id: Owner of the token
            expires_at: Absolute expiry timestamp

        Returns:
            Created RefreshToken model
        """
        now = datetime.now(timezone.utc)

        async with self.pool.acquire() as conn:
            token_id = await conn.fetchval(
                """
                INSERT INTO refresh_token (user_id, token, created_at, expires_at)
                VALUES ($1, $2, $3, $4)
                RETURNING id
                """,
                user_id,
                token,
                now,
                expires_at,
            )

        logger.info(
            "refresh_token_stored",
            user_id=user_id,
            token_id=token_id,
            expires_at=expires_at.isoformat(),
        )

        return RefreshToken(
            id=token_id,
            user_id=user_id,
            token=token,
            created_at=now,
            expires_at=expires_at,
        )

    async def find_user_id_by_refresh_token(self, token: str) -> Optional[int]:
        """Look up the owner of a refresh token that has not expired.

        Args:
            token: The bearer string

        Returns:
            The user id, or None if the token is unknown or expired
        """
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                """
                SELECT user_id
                FROM refresh_token
                WHERE token = $1 AND expires_at > $2
                """,
                token,
                datetime.now(timezone.utc),
            )

    async def delete_refresh_token(self, token: str) -> bool:
        """Hard-delete a refresh token.

        Args:
            token: The bearer string

        Returns:
            True if the token was deleted, False if not found
        """
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM refresh_token WHERE token = $1",
                token,
            )

        return result != "DELETE 0"
