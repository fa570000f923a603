"""Cookie transport for access and refresh tokens."""

from fastapi import Response

from groov.config import Settings
from groov.services.token_service import REFRESH_TOKEN_TTL

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

# Both cookies share the refresh-token lifetime; access-token expiry is
# enforced by the JWT itself.
COOKIE_MAX_AGE = int(REFRESH_TOKEN_TTL.total_seconds())


def set_token_cookie(response: Response, name: str, value: str, settings: Settings) -> None:
    """Attach an httpOnly, same-site token cookie to the response."""
    response.set_cookie(
        key=name,
        value=value,
        max_age=COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def clear_token_cookies(response: Response, settings: Settings) -> None:
    """Expire both token cookies on the client."""
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            key=name,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="strict",
        )
