"""Pydantic schemas for authentication and directory endpoints."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Username cannot be blank")
        return cleaned


class LoginRequest(BaseModel):
    username: str
    password: str


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    role: str
    created_at: datetime


class RegisterResponse(BaseModel):
    message: str
    user: AccountResponse


class LoginResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: AccountResponse


class MessageOnlyResponse(BaseModel):
    message: str


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    email: str


class RoleUpdateRequest(BaseModel):
    role: str = Field(..., pattern="^(user|admin)$")


__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "AccountResponse",
    "RegisterResponse",
    "LoginResponse",
    "MessageOnlyResponse",
    "UserSummary",
    "RoleUpdateRequest",
]
