"""Typed errors raised by the authentication core.

Each error carries the HTTP status the boundary layer responds with and a
public message that is safe to send to clients. Internal details belong in
the logs, never in ``detail``.
"""

from typing import Any, Dict, Optional


class AuthError(Exception):
    """Base class for authentication and authorization failures."""

    status_code: int = 400
    code: str = "auth_error"
    default_message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        """Render the JSON response body for this error."""
        return {"error": self.code, "detail": self.message}


class Conflict(AuthError):
    """Duplicate resource, e.g. a username that is already registered."""

    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"


class InvalidCredentials(AuthError):
    """Unknown username or wrong password (deliberately indistinguishable)."""

    status_code = 400
    code = "invalid_credentials"
    default_message = "Invalid username or password"


class MissingToken(AuthError):
    """A required token cookie was not sent."""

    status_code = 400
    code = "missing_token"
    default_message = "Token is required"


class InvalidToken(AuthError):
    """Token failed signature, format, or type verification."""

    status_code = 401
    code = "invalid_token"
    default_message = "Invalid token"


class TokenExpired(InvalidToken):
    """Token signature is valid but its lifetime has elapsed."""

    code = "token_expired"
    default_message = "Token has expired"


class NotFound(AuthError):
    """A referenced entity (user, refresh token) does not exist."""

    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Unauthorized(AuthError):
    """Request reached a protected route without a usable access token."""

    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None, body: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.body = body

    @classmethod
    def missing_token(cls) -> "Unauthorized":
        return cls("Access token missing", body={"missingToken": True})

    @classmethod
    def expired_token(cls) -> "Unauthorized":
        return cls("Access token invalid or expired", body={"expiredToken": True})

    def to_body(self) -> Dict[str, Any]:
        if self.body is not None:
            return dict(self.body)
        return super().to_body()


class Forbidden(AuthError):
    """Authenticated identity lacks a required role."""

    status_code = 403
    code = "forbidden"
    default_message = "Insufficient role"
