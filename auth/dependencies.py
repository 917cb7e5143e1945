"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_auth_service`` and ``get_current_user``
dependencies that are used across all protected routes.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.service import AuthService
from database.models import User
from database.session import get_db_session
from database.users import UserStore

# auto_error=False so a missing header reaches AuthService as "not logged in"
_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_auth_service(session: AsyncSession = Depends(db_session)) -> AuthService:
    return AuthService(UserStore(session))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Extract and verify the Bearer token, returning the authenticated
    ``User``.  Raises ``Unauthorized`` otherwise.
    """
    token = credentials.credentials if credentials else None
    return await service.identify(token)
