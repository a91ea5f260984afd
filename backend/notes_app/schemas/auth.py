"""Pydantic schemas for the authentication endpoints."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class _EmailRequest(BaseModel):
    """Base for requests keyed by email; emails are matched trimmed and lower-cased."""

    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class RegisterRequest(_EmailRequest):
    name: str = Field(min_length=2)
    password: str = Field(min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class VerifyOTPRequest(_EmailRequest):
    otp: str = Field(pattern=r"^[0-9]{6}$")


class ResendOTPRequest(_EmailRequest):
    pass


class LoginRequest(_EmailRequest):
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    """Public profile; password hash and one-time-code fields are never exposed."""

    user_id: str
    name: str
    email: str
    avatar: Optional[str] = None
    is_email_verified: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str
    user_id: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class MeResponse(BaseModel):
    user: UserOut


class MessageResponse(BaseModel):
    message: str
