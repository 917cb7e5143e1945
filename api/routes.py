"""
REST API routes outside the auth flow.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from auth.dependencies import get_current_user
from auth.routes import me_response
from auth.schemas import MeResponse
from database.models import User

router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/users/me", response_model=MeResponse, tags=["users"])
async def current_user(user: User = Depends(get_current_user)) -> MeResponse:
    """Protected profile route; same payload as ``/api/auth/me``."""
    return me_response(user)
