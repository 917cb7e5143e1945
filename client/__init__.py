"""
client: Python counterpart of the browser session layer.

Provides:
  • ``SessionContext``: current user, loading and error state
  • ``AuthAPI``: httpx client for the auth routes
  • token storage that survives restarts
"""

from client.api import AuthAPI, AuthAPIError, BearerTokenAuth
from client.session import SessionContext, SessionResult, SessionState
from client.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__all__ = [
    "AuthAPI",
    "AuthAPIError",
    "BearerTokenAuth",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "SessionContext",
    "SessionResult",
    "SessionState",
    "TokenStorage",
]
