"""
Credential store: persistence for ``User`` rows.

Uniqueness of ``username`` and ``email`` is ultimately enforced by the
table's unique constraints; ``create`` maps a violation to
``DuplicateUserError`` so callers never see driver-specific errors.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """A user with the same username or email already exists."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._session.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_by_identity(self, username: str, email: str) -> Optional[User]:
        """Return any user whose username *or* email collides."""
        result = await self._session.execute(
            select(User)
            .where(or_(User.username == username, User.email == normalize_email(email)))
            .limit(1)
        )
        return result.scalars().first()

    async def create(self, *, username: str, email: str, password_hash: str) -> User:
        user = User(
            user_id=uuid.uuid4(),
            username=username,
            email=normalize_email(email),
            password_hash=password_hash,
        )
        self._session.add(user)
        try:
            await self._session.flush()
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.info("Rejected duplicate user insert for %s", username)
            raise DuplicateUserError(username) from exc
        return user
