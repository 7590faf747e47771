"""
schemas/emails.py — Pydantic models for email and SMTP endpoints

Business Rules:
- to and subject are required and non-blank
- type "sent" is outgoing mail (status draft | sent), type "received" is
  recorded incoming mail and always starts unread
- SMTP port is 1–65535; a blank host clears the runtime configuration

Called by: routers/emails.py, routers/smtp.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmailCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str
    subject: str
    content: str = ""
    status: Literal["draft", "sent"] = "draft"
    type: Literal["sent", "received"] = "sent"
    from_address: str | None = Field(None, alias="from")

    @field_validator("to", "subject")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v


class SmtpConfigure(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    host: str
    port: int = Field(587, ge=1, le=65535)
    user: str = ""
    password: str = ""
    secure: bool = False
    from_address: str = Field("", alias="fromAddress")

    @field_validator("host", "user", "from_address")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()
