"""
schemas/auth.py — Pydantic models for login and user administration

Business Rules:
- Login carries the CAPTCHA token as recaptchaToken (web client) or
  recaptcha_token
- Passwords are at least 8 characters; they are hashed before storage and
  never echoed back
- role is "user" or "admin"

Called by: routers/auth.py, routers/users.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_PASSWORD_LENGTH = 8


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    password: str
    recaptcha_token: str | None = Field(None, alias="recaptchaToken")


class UserCreate(BaseModel):
    username: str
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    email: str
    role: Literal["user", "admin"] = "user"
    is_active: bool = True

    @field_validator("username", "email")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v


class UserUpdate(BaseModel):
    username: str | None = None
    password: str | None = Field(None, min_length=MIN_PASSWORD_LENGTH)
    email: str | None = None
    role: Literal["user", "admin"] | None = None
    is_active: bool | None = None

    @field_validator("username", "email")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v
