"""
schemas/support.py — Pydantic models for support tickets and notifications

Called by: routers/support.py, routers/notifications.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator

TicketStatus = Literal["open", "in_progress", "resolved"]


class TicketCreate(BaseModel):
    user: str
    email: str | None = None
    issue: str
    priority: Literal["low", "medium", "high"] = "medium"

    @field_validator("user", "issue")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v


class TicketUpdate(BaseModel):
    user: str | None = None
    email: str | None = None
    issue: str | None = None
    priority: Literal["low", "medium", "high"] | None = None
    status: TicketStatus | None = None

    @field_validator("user", "issue")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v


class TicketStatusChange(BaseModel):
    status: TicketStatus


class NotificationCreate(BaseModel):
    message: str
    type: Literal["info", "success", "warning", "error"] = "info"
