"""Async HTTP client for the groov auth API with single-flight token refresh."""

import asyncio
from typing import Any, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)

AUTH_PREFIX = "/auth/"


class SessionExpiredError(Exception):
    """The refresh token was rejected; the caller must log in again."""

    def __init__(self, response: Optional[httpx.Response] = None):
        self.response = response
        status = response.status_code if response is not None else None
        super().__init__(f"Session expired (refresh returned {status})")


class GroovClient:
    """Cookie-based API client.

    When a request outside /auth/ comes back 401, the client refreshes the
    access token and retries the request once. Concurrent callers that hit a
    401 while a refresh is running await that same refresh instead of
    starting their own.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3003",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )
        self._refresh_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "GroovClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._http.cookies

    async def signup(self, username: str, password: str) -> None:
        response = await self._http.post(
            "/auth/signup", json={"username": username, "password": password}
        )
        response.raise_for_status()

    async def login(self, username: str, password: str) -> None:
        """Log in; the server stores both tokens in the cookie jar."""
        response = await self._http.post(
            "/auth/login", json={"username": username, "password": password}
        )
        response.raise_for_status()

    async def logout(self) -> None:
        response = await self._http.post("/auth/logout")
        response.raise_for_status()
        self._http.cookies.clear()

    async def me(self) -> Optional[dict]:
        """Return the current user, or None when not logged in."""
        try:
            response = await self.request("GET", "/auth/me")
        except (httpx.HTTPStatusError, SessionExpiredError):
            return None
        return response.json()

    async def refresh(self) -> str:
        """Refresh the access token, sharing one in-flight call between callers.

        Returns:
            The new access token

        Raises:
            SessionExpiredError: If the server rejected the refresh token
        """
        if self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._do_refresh())
            self._refresh_task.add_done_callback(self._clear_refresh_task)
        return await asyncio.shield(self._refresh_task)

    def _clear_refresh_task(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _do_refresh(self) -> str:
        response = await self._http.post("/auth/refresh")
        if response.status_code != 200:
            logger.info("token_refresh_failed", status_code=response.status_code)
            raise SessionExpiredError(response)
        logger.debug("token_refreshed")
        return response.json()["newAccessToken"]

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, refreshing and retrying once on 401.

        Raises:
            SessionExpiredError: If the retry needed a refresh that failed
            httpx.HTTPStatusError: For any other error status
        """
        response = await self._http.request(method, url, **kwargs)

        if response.status_code == 401 and not url.startswith(AUTH_PREFIX):
            await self.refresh()
            response = await self._http.request(method, url, **kwargs)

        response.raise_for_status()
        return response
