"""
Session context: client-side owner of the current user.

State machine::

    UNKNOWN ──restore()──▶ AUTHENTICATING ──▶ AUTHENTICATED | ANONYMOUS
                             ▲
    login() / signup() ──────┘            logout() ──▶ ANONYMOUS

The context is an explicit object handed to whatever UI drives it; UIs
observe it through ``subscribe``.  Remote operations never raise: they
resolve to a ``SessionResult``.  Operations are not serialized; when two
overlap, whichever finishes last decides the visible state.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx

from client.api import AuthAPI, AuthAPIError
from client.storage import TOKEN_KEY, TokenStorage

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNKNOWN = "unknown"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class SessionResult:
    success: bool
    error: Optional[str] = None


Listener = Callable[["SessionContext"], None]


class SessionContext:
    def __init__(self, api: AuthAPI, storage: TokenStorage) -> None:
        self.api = api
        self.storage = storage
        self.state = SessionState.UNKNOWN
        self.user: Optional[Dict[str, Any]] = None
        self.loading = True
        self.error = ""
        self._listeners: List[Listener] = []

    @classmethod
    async def open(cls, api: AuthAPI, storage: TokenStorage) -> "SessionContext":
        """Build a context and restore any persisted session."""
        ctx = cls(api, storage)
        await ctx.restore()
        return ctx

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED and self.user is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for state changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **fields: Any) -> None:
        for name, value in fields.items():
            setattr(self, name, value)
        for listener in list(self._listeners):
            listener(self)

    async def restore(self) -> None:
        """Resolve a stored token to a user, or settle as anonymous."""
        token = self.storage.get(TOKEN_KEY)
        if not token:
            self._update(state=SessionState.ANONYMOUS, user=None, loading=False)
            return

        self._update(state=SessionState.AUTHENTICATING, loading=True)
        try:
            user = await self.api.me(token)
        except AuthAPIError as exc:
            logger.info("Discarding stored session: %s", exc.message)
            self._forget_token()
            self._update(state=SessionState.ANONYMOUS, user=None, loading=False)
            return
        self._update(state=SessionState.AUTHENTICATED, user=user, loading=False)

    async def _authenticate(
        self,
        call: Callable[[], Awaitable[Tuple[str, Dict[str, Any]]]],
    ) -> SessionResult:
        self._update(state=SessionState.AUTHENTICATING, loading=True, error="")
        try:
            token, user = await call()
        except AuthAPIError as exc:
            return self._fail(exc.message)

        try:
            self.storage.set(TOKEN_KEY, token)
        except OSError as exc:
            logger.warning("Could not persist session token: %s", exc)
            return self._fail("Could not save session")
        self._update(state=SessionState.AUTHENTICATED, user=user, loading=False)
        return SessionResult(success=True)

    def _fail(self, message: str) -> SessionResult:
        # an anonymous session must not keep sending a previous token
        self._forget_token()
        self._update(state=SessionState.ANONYMOUS, user=None, loading=False, error=message)
        return SessionResult(success=False, error=message)

    def _forget_token(self) -> None:
        try:
            self.storage.remove(TOKEN_KEY)
        except OSError as exc:
            logger.warning("Could not remove session token: %s", exc)

    async def login(self, email: str, password: str) -> SessionResult:
        return await self._authenticate(lambda: self.api.login(email, password))

    async def signup(self, username: str, email: str, password: str) -> SessionResult:
        return await self._authenticate(lambda: self.api.signup(username, email, password))

    def logout(self) -> None:
        self._forget_token()
        self._update(state=SessionState.ANONYMOUS, user=None, error="", loading=False)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Make an authenticated call through the API client.

        A 401 means the server no longer accepts the token, so the
        session is dropped before the response is handed back.
        """
        response = await self.api.client.request(method, url, **kwargs)
        if response.status_code == httpx.codes.UNAUTHORIZED and self.storage.get(TOKEN_KEY):
            logger.info("Session rejected by server; logging out")
            self.logout()
        return response
