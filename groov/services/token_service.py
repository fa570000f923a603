"""Signed, time-limited access and refresh tokens."""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

import jwt
import structlog

from groov.exceptions import InvalidToken, TokenExpired
from groov.models.auth import TokenClaims
from groov.models.user import Role

logger = structlog.get_logger(__name__)

# Constants
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 30
REFRESH_TOKEN_EXPIRE_HOURS = 6

ACCESS_TOKEN_TTL = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
REFRESH_TOKEN_TTL = timedelta(hours=REFRESH_TOKEN_EXPIRE_HOURS)

TokenType = Literal["access", "refresh"]


class TokenService:
    """Issues and verifies JWTs, each kind signed with its own secret."""

    def __init__(self, access_secret: str, refresh_secret: str):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens need distinct secrets")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret

    def issue(
        self,
        claims: TokenClaims,
        ttl: timedelta,
        secret: str,
        token_type: TokenType = "access",
    ) -> str:
        """Create a signed JWT carrying the identity claims.

        Args:
            claims: User id and role to embed
            ttl: Lifetime of the token
            secret: HMAC signing secret
            token_type: "access" or "refresh", checked on verification

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(claims.id),
            "role": claims.role.value,
            "type": token_type,
            "jti": secrets.token_hex(16),
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    def verify(
        self,
        token: str,
        secret: str,
        token_type: Optional[TokenType] = None,
    ) -> TokenClaims:
        """Decode and validate a JWT.

        Args:
            token: Encoded JWT string
            secret: HMAC secret the token must be signed with
            token_type: Expected "type" claim, if any

        Returns:
            The identity claims

        Raises:
            TokenExpired: If the token lifetime has elapsed
            InvalidToken: If the signature, format, or type is wrong
        """
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired()
        except jwt.InvalidTokenError as e:
            logger.debug("token_rejected", reason=str(e))
            raise InvalidToken()

        if token_type is not None and payload.get("type") != token_type:
            raise InvalidToken("Invalid token type")

        try:
            return TokenClaims(id=int(payload["sub"]), role=Role(payload["role"]))
        except (KeyError, ValueError):
            raise InvalidToken("Malformed token payload")

    def issue_access_token(self, claims: TokenClaims) -> str:
        return self.issue(claims, ACCESS_TOKEN_TTL, self._access_secret, "access")

    def issue_refresh_token(self, claims: TokenClaims) -> str:
        return self.issue(claims, REFRESH_TOKEN_TTL, self._refresh_secret, "refresh")

    def verify_access_token(self, token: str) -> TokenClaims:
        return self.verify(token, self._access_secret, "access")

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return self.verify(token, self._refresh_secret, "refresh")
