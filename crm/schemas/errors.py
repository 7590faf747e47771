"""
schemas/errors.py — Error body returned by every exception handler in main.py

Business Rules:
- Request validation failures list one FieldError per bad field (422)
- Service validation errors map field name → message (400)
- Delivery failures carry the saved record id so the client can retry (502)

Called by: main.py
Depends on: nothing
"""

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    loc: list[str | int] = Field(default_factory=list, description="Path to the rejected input")
    msg: str = ""
    type: str = ""


def field_errors(errors) -> list[FieldError]:
    """Convert pydantic/FastAPI error dicts to FieldError items."""
    return [
        FieldError(loc=list(e.get("loc", ())), msg=e.get("msg", ""), type=e.get("type", ""))
        for e in errors
    ]


class ErrorResponse(BaseModel):
    error: str = Field(description="Human-readable message")
    status_code: int
    request_id: str = Field("", description="Matches the X-Request-ID response header")
    detail: list[FieldError] | dict[str, str] | None = None
