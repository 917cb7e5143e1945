"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256.
Secret key is loaded from ``config.jwt_secret`` (env var: ``JWT_SECRET``).

Verification distinguishes three failure kinds (malformed, bad signature,
expired) so callers can log them, but every kind shares the ``TokenError``
base and is reported to clients as the same "Invalid token".
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Optional

from pydantic import BaseModel, ValidationError

from config.settings import config


class TokenPayload(BaseModel):
    sub: str
    iat: int
    exp: int


class TokenError(Exception):
    """Base exception for token errors."""


class MalformedTokenError(TokenError):
    """Token cannot be split, decoded or parsed."""


class BadSignatureError(TokenError):
    """Signature does not match the payload under the server secret."""


class TokenExpiredError(TokenError):
    """Token is past its ``exp`` claim."""


def _sign(raw: bytes) -> str:
    return hmac.new(config.jwt_secret.encode(), raw, hashlib.sha256).hexdigest()


def create_token(user_id: str, *, now: Optional[float] = None) -> str:
    """Create a signed token containing ``user_id``, issue time and expiry."""
    issued_at = int(time.time() if now is None else now)
    payload = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + config.jwt_expiry_seconds,
    }
    raw = json.dumps(payload, separators=(",", ":")).encode()
    return urlsafe_b64encode(raw).decode().rstrip("=") + "." + _sign(raw)


def decode_token(token: str, *, now: Optional[float] = None) -> TokenPayload:
    """
    Verify ``token`` and return its payload.

    Raises:
        MalformedTokenError: not ``<payload>.<signature>`` or undecodable
        BadSignatureError: signature mismatch
        TokenExpiredError: current time is past ``exp``
    """
    parts = token.split(".")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedTokenError("bad format")

    encoded, signature = parts
    try:
        raw = urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError("bad encoding") from exc

    if not hmac.compare_digest(signature.encode(), _sign(raw).encode()):
        raise BadSignatureError("bad signature")

    try:
        payload = TokenPayload.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        raise MalformedTokenError("bad payload") from exc

    current = time.time() if now is None else now
    if payload.exp <= current:
        raise TokenExpiredError("token expired")
    return payload


def verify_token(token: str) -> str:
    """Verify token and return the subject ``user_id``."""
    return decode_token(token).sub
