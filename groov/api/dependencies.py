"""FastAPI dependencies for service access and authorization."""

from typing import Awaitable, Callable

import structlog
from fastapi import Depends, Request

from groov.api.cookies import ACCESS_TOKEN_COOKIE
from groov.config import Settings
from groov.container import Container
from groov.exceptions import Forbidden, InvalidToken, Unauthorized
from groov.models.auth import TokenClaims
from groov.models.user import Role
from groov.services.session_service import SessionService
from groov.services.token_service import TokenService

logger = structlog.get_logger(__name__)


def get_container(request: Request) -> Container:
    """Return the service container built during application startup."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container


def get_app_settings(container: Container = Depends(get_container)) -> Settings:
    return container.settings


def get_session_service(container: Container = Depends(get_container)) -> SessionService:
    return container.sessions


def get_token_service(container: Container = Depends(get_container)) -> TokenService:
    return container.tokens


def require_roles(*roles: Role) -> Callable[..., Awaitable[TokenClaims]]:
    """Build an authorization gate for a protected route.

    The gate reads the access-token cookie, verifies it, and checks the role
    claim against ``roles``. With no roles, any authenticated identity passes.
    On success the claims are stored on ``request.state.identity``.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles(Role.ADMIN))])

    Raises:
        Unauthorized: 401 {"missingToken": true} without a cookie,
            401 {"expiredToken": true} when verification fails
        Forbidden: 403 when the role is not allowed
    """
    required = frozenset(roles)

    async def authorize(
        request: Request,
        tokens: TokenService = Depends(get_token_service),
    ) -> TokenClaims:
        access_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        if not access_token:
            raise Unauthorized.missing_token()

        try:
            claims = tokens.verify_access_token(access_token)
        except InvalidToken:
            raise Unauthorized.expired_token()

        if required and claims.role not in required:
            logger.warning(
                "authorization_denied",
                user_id=claims.id,
                role=claims.role.value,
                required=sorted(r.value for r in required),
                path=request.url.path,
            )
            raise Forbidden()

        request.state.identity = claims
        return claims

    return authorize


# Any authenticated identity
authenticate = require_roles()
