"""
Request / response schemas for the auth API.

Requests are validated here, before anything reaches ``AuthService``.
``UserOut`` is the only shape a user ever leaves the server in; it has no
password hash field.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from auth.password import MAX_PASSWORD_BYTES


def _check_password_bytes(value: str) -> str:
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=2, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def _password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(validation_alias=AliasChoices("user_id", "id"))
    username: str
    email: str
    created_at: Optional[datetime] = None


class UserData(BaseModel):
    user: UserOut


class AuthResponse(BaseModel):
    status: str = "success"
    token: str
    data: UserData


class MeResponse(BaseModel):
    status: str = "success"
    data: UserData
