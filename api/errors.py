"""
Exception handlers: the single place errors become HTTP responses.

Envelope: ``{"status": "fail" | "error", "message": ...}``.  4xx are
"fail", 5xx are "error".  Unexpected exceptions are logged and reported
without internal detail.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth.errors import AuthError, Internal, ValidationError

logger = logging.getLogger(__name__)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "invalid")})
    return errors


def _envelope(exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error → envelope translation to ``app``."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        if exc.status_code >= 500:
            logger.error("%s %s — %s", request.method, request.url.path, exc.message)
        return _envelope(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        message = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        return _envelope(ValidationError(message or None, errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        status = "error" if exc.status_code >= 500 else "fail"
        body: Dict[str, Any] = {"status": status, "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _envelope(Internal())
