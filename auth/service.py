"""
Auth service — signup, login and "who am I".

Composes the credential store, the password hasher and the token
issuer.  Failures are raised as ``auth.errors`` types; nothing else
escapes except store errors, which the API layer reports as 5xx.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from auth.errors import INCORRECT_CREDENTIALS, NOT_LOGGED_IN, Conflict, Unauthorized
from auth.jwt import TokenError, create_token, decode_token
from auth.password import check_password, hash_password
from database.models import User
from database.users import DuplicateUserError, UserStore

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    token: str


class AuthService:
    def __init__(self, store: UserStore) -> None:
        self.store = store

    async def signup(self, username: str, email: str, password: str) -> AuthResult:
        """Create a user and issue a token.  Raises ``Conflict`` on duplicates."""
        if await self.store.find_by_identity(username, email) is not None:
            raise Conflict()

        password_hash = await asyncio.to_thread(hash_password, password)
        try:
            user = await self.store.create(
                username=username, email=email, password_hash=password_hash
            )
        except DuplicateUserError:
            # lost the race against a concurrent signup
            raise Conflict() from None

        logger.info("Registered user %s (%s)", user.username, user.user_id)
        return AuthResult(user=user, token=create_token(str(user.user_id)))

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials.  Unknown email and wrong password look the same."""
        user = await self.store.find_by_email(email)
        stored_hash = user.password_hash if user is not None else None
        matches = await asyncio.to_thread(check_password, password, stored_hash)

        if user is None or not matches:
            logger.info("Rejected login attempt")
            raise Unauthorized(INCORRECT_CREDENTIALS)

        logger.info("Login: %s (%s)", user.username, user.user_id)
        return AuthResult(user=user, token=create_token(str(user.user_id)))

    async def identify(self, token: Optional[str]) -> User:
        """Resolve a bearer token to its user."""
        if not token:
            raise Unauthorized(NOT_LOGGED_IN)

        try:
            user_id = uuid.UUID(decode_token(token).sub)
        except (TokenError, ValueError) as exc:
            logger.debug("Rejected token: %s", type(exc).__name__)
            raise Unauthorized() from None

        user = await self.store.get(user_id)
        if user is None:
            logger.debug("Token subject %s no longer exists", user_id)
            raise Unauthorized()
        return user
