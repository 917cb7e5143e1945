"""
Auth API routes — signup, login, me.

Route prefix: /api/auth
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_auth_service, get_current_user
from auth.schemas import AuthResponse, LoginRequest, MeResponse, SignupRequest, UserData, UserOut
from auth.service import AuthResult, AuthService
from database.models import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        token=result.token,
        data=UserData(user=UserOut.model_validate(result.user)),
    )


def me_response(user: User) -> MeResponse:
    return MeResponse(data=UserData(user=UserOut.model_validate(user)))


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    req: SignupRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user."""
    result = await service.signup(req.username, req.email, req.password)
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return _auth_response(result)


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)) -> MeResponse:
    """Return the user the bearer token belongs to."""
    return me_response(user)
