"""Authentication API endpoints."""

from typing import Optional

import structlog
from fastapi import APIRouter, Cookie, Depends, Response, status

from groov.api.cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    clear_token_cookies,
    set_token_cookie,
)
from groov.api.dependencies import authenticate, get_app_settings, get_session_service
from groov.config import Settings
from groov.exceptions import InvalidToken, MissingToken, NotFound, Unauthorized
from groov.models.auth import (
    LoginRequest,
    RefreshResponse,
    SignupRequest,
    TokenClaims,
    UserSummary,
)
from groov.services.session_service import SessionService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/signup")
async def signup(
    request: SignupRequest,
    sessions: SessionService = Depends(get_session_service),
) -> Response:
    """Register a new account.

    Returns:
        Empty 200 response; the client logs in separately

    Raises:
        Conflict (409): If the username is already registered
    """
    await sessions.signup(request.username, request.password)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/login")
async def login(
    request: LoginRequest,
    sessions: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Login with username and password.

    Sets the ``accessToken`` and ``refreshToken`` cookies on success.

    Raises:
        InvalidCredentials (400): If the username or password is wrong
    """
    tokens = await sessions.login(request.username, request.password)

    response = Response(status_code=status.HTTP_200_OK)
    set_token_cookie(response, ACCESS_TOKEN_COOKIE, tokens.access_token, settings)
    set_token_cookie(response, REFRESH_TOKEN_COOKIE, tokens.refresh_token, settings)
    return response


@router.post("/logout")
async def logout(
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_TOKEN_COOKIE),
    sessions: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Clear both cookies and end the server-side session if there is one."""
    if refresh_token:
        await sessions.logout(refresh_token)

    response = Response(status_code=status.HTTP_200_OK)
    clear_token_cookies(response, settings)
    return response


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_TOKEN_COOKIE),
    sessions: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_app_settings),
) -> RefreshResponse:
    """Issue a new access token from the refresh-token cookie.

    Raises:
        MissingToken (400): If the refresh-token cookie is missing
        InvalidToken (401): If the token is unknown, expired, or tampered with
    """
    if not refresh_token:
        raise MissingToken("Refresh token is required")

    try:
        new_access_token = await sessions.refresh(refresh_token)
    except NotFound:
        raise InvalidToken("Invalid or expired refresh token")
    except InvalidToken as e:
        logger.warning("refresh_rejected", reason=e.code)
        raise InvalidToken("Invalid or expired refresh token")

    set_token_cookie(response, ACCESS_TOKEN_COOKIE, new_access_token, settings)
    return RefreshResponse(newAccessToken=new_access_token)


@router.get("/me", response_model=UserSummary)
async def get_me(
    identity: TokenClaims = Depends(authenticate),
    sessions: SessionService = Depends(get_session_service),
) -> UserSummary:
    """Get the user behind the access-token cookie.

    Raises:
        Unauthorized (401): {"missingToken": true} without a cookie,
            {"expiredToken": true} if it does not resolve to a live user
    """
    user = await sessions.find_active_user(identity.id)
    if user is None:
        raise Unauthorized.expired_token()

    return UserSummary.from_user(user)
