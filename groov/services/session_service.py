"""Signup, login, refresh, logout, and current-user resolution."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import structlog

from groov.exceptions import Conflict, InvalidCredentials, InvalidToken, NotFound
from groov.models.auth import TokenClaims, TokenPair
from groov.models.user import Role, User
from groov.services.credential_store import CredentialStore
from groov.services.password_service import PasswordService
from groov.services.token_service import REFRESH_TOKEN_TTL, TokenService

logger = structlog.get_logger(__name__)


class SessionService:
    """Stateless orchestrator over the credential store, hasher, and token issuer.

    Session lifecycle: Anonymous -> Authenticated (login) -> Refreshed* ->
    LoggedOut (refresh row deleted) or Expired (refresh TTL elapsed).
    """

    def __init__(
        self,
        store: CredentialStore,
        passwords: PasswordService,
        tokens: TokenService,
    ):
        self.store = store
        self.passwords = passwords
        self.tokens = tokens

    async def signup(self, username: str, password: str) -> User:
        """Register a new user with role=user. Does not log in.

        Raises:
            Conflict: If the username is already registered
        """
        existing = await self.store.find_user_by_username(username)
        if existing is not None:
            logger.info("signup_conflict", username=username)
            raise Conflict("Username already exists")

        password_hash = await asyncio.to_thread(self.passwords.hash, password)
        user = await self.store.insert_user(username, password_hash, Role.USER)

        logger.info("user_signed_up", user_id=user.id, username=username)
        return user

    async def login(self, username: str, password: str) -> TokenPair:
        """Authenticate and open a new session.

        Unknown username, wrong password, and deleted account all raise the
        same error; only the log line tells them apart.

        Returns:
            Fresh access and refresh tokens

        Raises:
            InvalidCredentials: If authentication fails
        """
        result = await self.store.find_user_by_username(username)

        if result is None:
            await asyncio.to_thread(self.passwords.verify_dummy, password)
            logger.warning("login_failed", username=username, reason="unknown_username")
            raise InvalidCredentials()

        user, password_hash = result

        matches = await asyncio.to_thread(self.passwords.verify, password, password_hash)
        if not matches:
            logger.warning("login_failed", username=username, reason="wrong_password")
            raise InvalidCredentials()

        if user.deleted:
            logger.warning("login_failed", username=username, reason="deleted_user")
            raise InvalidCredentials()

        claims = TokenClaims(id=user.id, role=user.role)
        access_token = self.tokens.issue_access_token(claims)
        refresh_token = self.tokens.issue_refresh_token(claims)

        await self.store.insert_refresh_token(
            refresh_token,
            user.id,
            datetime.now(timezone.utc) + REFRESH_TOKEN_TTL,
        )

        logger.info("user_logged_in", user_id=user.id, username=user.username)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def refresh(self, refresh_token: str) -> str:
        """Exchange a stored refresh token for a new access token.

        The refresh token itself is not rotated and stays valid until logout
        or expiry.

        Raises:
            NotFound: If no live row holds this token, or its owner is gone
                or soft-deleted
            InvalidToken: If the token fails verification (TokenExpired when
                only its lifetime is the problem)
        """
        user_id = await self.store.find_user_id_by_refresh_token(refresh_token)
        if user_id is None:
            logger.warning("refresh_token_not_found")
            raise NotFound("Refresh token does not exist")

        claims = self.tokens.verify_refresh_token(refresh_token)
        if claims.id != user_id:
            logger.warning("refresh_token_subject_mismatch", user_id=user_id)
            raise InvalidToken()

        user = await self.find_active_user(user_id)
        if user is None:
            logger.warning("refresh_user_inactive", user_id=user_id)
            raise NotFound("User does not exist")

        access_token = self.tokens.issue_access_token(TokenClaims(id=user.id, role=user.role))
        logger.info("access_token_refreshed", user_id=user_id)
        return access_token

    async def logout(self, refresh_token: str) -> None:
        """Close the session owning this refresh token. Idempotent."""
        deleted = await self.store.delete_refresh_token(refresh_token)
        logger.info("user_logged_out", session_found=deleted)

    async def get_current_user(self, access_token: Optional[str]) -> Optional[User]:
        """Resolve an access token to its user, or None. Never raises."""
        if not access_token:
            return None

        try:
            claims = self.tokens.verify_access_token(access_token)
        except InvalidToken:
            return None

        return await self.find_active_user(claims.id)

    async def find_active_user(self, user_id: int) -> Optional[User]:
        """Return the user unless it is unknown or soft-deleted."""
        user = await self.store.find_user_by_id(user_id)
        if user is None or user.deleted:
            return None
        return user
