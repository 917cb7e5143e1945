"""
HTTP client for the auth API.

Every failure mode (non-2xx status, transport error, unexpected body) is
raised as ``AuthAPIError`` carrying a display message, preferring the
server's own ``message`` field.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Generator, Optional, Tuple

import httpx

from client.storage import TOKEN_KEY, TokenStorage

logger = logging.getLogger(__name__)


class AuthAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BearerTokenAuth(httpx.Auth):
    """Attach the persisted token (if any) to every outgoing request."""

    def __init__(self, storage: TokenStorage) -> None:
        self._storage = storage

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._storage.get(TOKEN_KEY)
        if token and "Authorization" not in request.headers:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


class AuthAPI:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    @classmethod
    def connect(
        cls,
        base_url: str,
        storage: TokenStorage,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> "AuthAPI":
        client = httpx.AsyncClient(
            base_url=base_url,
            auth=BearerTokenAuth(storage),
            transport=transport,
            timeout=timeout,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _call(self, method: str, url: str, fallback: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise AuthAPIError(fallback) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            message = body.get("message") if isinstance(body, dict) else None
            raise AuthAPIError(message or fallback, response.status_code)
        if not isinstance(body, dict):
            raise AuthAPIError(fallback, response.status_code)
        return body

    @staticmethod
    def _session_payload(body: Dict[str, Any], fallback: str) -> Tuple[str, Dict[str, Any]]:
        try:
            return body["token"], body["data"]["user"]
        except (KeyError, TypeError):
            raise AuthAPIError(fallback) from None

    async def signup(self, username: str, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
        """Return ``(token, user)`` for a new account."""
        body = await self._call(
            "POST", "/api/auth/signup", "Signup failed",
            json={"username": username, "email": email, "password": password},
        )
        return self._session_payload(body, "Signup failed")

    async def login(self, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
        """Return ``(token, user)`` for valid credentials."""
        body = await self._call(
            "POST", "/api/auth/login", "Login failed",
            json={"email": email, "password": password},
        )
        return self._session_payload(body, "Login failed")

    async def me(self, token: Optional[str] = None) -> Dict[str, Any]:
        """Return the current user; ``token`` overrides the stored one."""
        headers = {"Authorization": f"Bearer {token}"} if token else None
        body = await self._call("GET", "/api/auth/me", "Failed to fetch current user", headers=headers)
        try:
            return body["data"]["user"]
        except (KeyError, TypeError):
            raise AuthAPIError("Failed to fetch current user") from None
