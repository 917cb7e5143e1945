"""
Auth error taxonomy.

Every failure that leaves the auth service is one of these; the API layer
turns them into ``{status, message}`` envelopes in one place
(see ``api.errors``).
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, List, Optional

NOT_LOGGED_IN = "You are not logged in! Please log in to get access."
INVALID_TOKEN = "Invalid token"
INCORRECT_CREDENTIALS = "Incorrect email or password"
USER_EXISTS = "User with this email or username already exists"


class AuthError(Exception):
    status_code: HTTPStatus = HTTPStatus.BAD_REQUEST
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status(self) -> str:
        return "error" if self.status_code >= 500 else "fail"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message}


class ValidationError(AuthError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Invalid input data"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class Conflict(AuthError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = USER_EXISTS


class Unauthorized(AuthError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = INVALID_TOKEN


class Internal(AuthError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"
