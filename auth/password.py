"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import bcrypt

from config.settings import config

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72

_dummy_hash: str | None = None


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (auto-salted, ``config.bcrypt_rounds``)."""
    salt = bcrypt.gensalt(rounds=config.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError, AttributeError):
        return False


def dummy_hash() -> str:
    """
    A throwaway hash used to burn the same bcrypt cost when no user
    matched, so login timing does not reveal unknown emails.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("not-a-real-password")
    return _dummy_hash


def check_password(password: str, password_hash: str | None) -> bool:
    """
    ``verify_password`` that also spends one bcrypt comparison when there
    is no stored hash.  Blocking; call it from a worker thread.
    """
    if password_hash is None:
        verify_password(password, dummy_hash())
        return False
    return verify_password(password, password_hash)
