"""
schemas/crm.py — Pydantic models for contractor, task and offer endpoints

Business Rules:
- Contractor name, email and phone are required and non-blank
- Task date is YYYY-MM-DD, time is HH:MM
- Offer amount is a non-negative integer; discount 0–100; VAT ≥ 0 (default 23)
- final_amount is never accepted from clients; the server prices offers
- camelCase keys sent by the web client (contractorName, vatRate, ...) are
  accepted alongside snake_case

Called by: routers/contractors.py, routers/tasks.py, routers/offers.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Priority = Literal["low", "medium", "high"]
OfferStatus = Literal["draft", "sent", "accepted", "rejected", "expired"]


def _not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Field must not be blank")
    return v


def _clean_nip(v: str | None) -> str | None:
    """Tax ids are stored without separators: "123-456-78-90" → "1234567890"."""
    if v is None:
        return None
    return v.replace("-", "").replace(" ", "") or None


def _iso_date(v: str) -> str:
    return date.fromisoformat(v.strip()[:10]).isoformat()


def _hh_mm(v: str) -> str:
    return datetime.strptime(v.strip()[:5], "%H:%M").strftime("%H:%M")


def _currency_code(v: str) -> str:
    v = v.strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Currency must be a 3-letter code")
    return v


def _parse_loose_date(v):
    """'' → None, '2025-09-30T00:00:00.000Z' → date(2025, 9, 30)."""
    if v is None or isinstance(v, date):
        return v.date() if isinstance(v, datetime) else v
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
        return date.fromisoformat(v[:10])
    return v


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Contractors ──────────────────────────────────────────────────────


class ContractorCreate(_CamelModel):
    name: str
    email: str
    phone: str
    nip: str | None = None
    regon: str | None = None
    krs: str | None = None
    account_number: str | None = Field(None, alias="accountNumber")
    province: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = Field(None, alias="postalCode")
    country: str = "Polska"
    status: Literal["active", "inactive"] = "active"

    @field_validator("name", "email", "phone")
    @classmethod
    def required_not_blank(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("nip")
    @classmethod
    def nip_digits(cls, v: str | None) -> str | None:
        return _clean_nip(v)


class ContractorUpdate(_CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    nip: str | None = None
    regon: str | None = None
    krs: str | None = None
    account_number: str | None = Field(None, alias="accountNumber")
    province: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = Field(None, alias="postalCode")
    country: str | None = None
    status: Literal["active", "inactive"] | None = None

    @field_validator("name", "email", "phone")
    @classmethod
    def required_not_blank(cls, v: str | None) -> str | None:
        return _not_blank(v) if v is not None else None

    @field_validator("nip")
    @classmethod
    def nip_digits(cls, v: str | None) -> str | None:
        return _clean_nip(v)


# ── Tasks ────────────────────────────────────────────────────────────


class TaskCreate(BaseModel):
    title: str
    date: str
    time: str
    priority: Priority = "medium"
    status: Literal["pending", "completed"] = "pending"

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("date")
    @classmethod
    def iso_date(cls, v: str) -> str:
        return _iso_date(v)

    @field_validator("time")
    @classmethod
    def hh_mm(cls, v: str) -> str:
        return _hh_mm(v)


class TaskUpdate(BaseModel):
    title: str | None = None
    date: str | None = None
    time: str | None = None
    priority: Priority | None = None
    status: Literal["pending", "completed"] | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str | None) -> str | None:
        return _not_blank(v) if v is not None else None

    @field_validator("date")
    @classmethod
    def iso_date(cls, v: str | None) -> str | None:
        return _iso_date(v) if v is not None else None

    @field_validator("time")
    @classmethod
    def hh_mm(cls, v: str | None) -> str | None:
        return _hh_mm(v) if v is not None else None


# ── Offers ───────────────────────────────────────────────────────────


class OfferCreate(_CamelModel):
    contractor_id: str | None = Field(None, alias="contractorId")
    contractor_name: str | None = Field(None, alias="contractorName")
    title: str
    description: str | None = None
    amount: int = Field(..., ge=0)
    vat_rate: int = Field(23, ge=0, alias="vatRate")
    discount_percent: int = Field(0, ge=0, le=100, alias="discountPercent")
    currency: str = "PLN"
    valid_until: date | None = Field(None, alias="validUntil")
    payment_terms: str | None = Field("14 dni", alias="paymentTerms")
    category: str | None = "Standardowa"
    notes: str | None = None
    status: Literal["draft", "sent"] = "draft"

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("valid_until", mode="before")
    @classmethod
    def loose_date(cls, v):
        return _parse_loose_date(v)

    @field_validator("currency")
    @classmethod
    def currency_code(cls, v: str) -> str:
        return _currency_code(v)


class OfferUpdate(_CamelModel):
    contractor_id: str | None = Field(None, alias="contractorId")
    contractor_name: str | None = Field(None, alias="contractorName")
    title: str | None = None
    description: str | None = None
    amount: int | None = Field(None, ge=0)
    vat_rate: int | None = Field(None, ge=0, alias="vatRate")
    discount_percent: int | None = Field(None, ge=0, le=100, alias="discountPercent")
    currency: str | None = None
    valid_until: date | None = Field(None, alias="validUntil")
    payment_terms: str | None = Field(None, alias="paymentTerms")
    category: str | None = None
    notes: str | None = None
    status: OfferStatus | None = None

    @field_validator("title", "contractor_name")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        return _not_blank(v) if v is not None else None

    @field_validator("valid_until", mode="before")
    @classmethod
    def loose_date(cls, v):
        return _parse_loose_date(v)

    @field_validator("currency")
    @classmethod
    def currency_code(cls, v: str | None) -> str | None:
        return _currency_code(v) if v is not None else None


class OfferStatusChange(BaseModel):
    status: Literal["accepted", "rejected", "expired"]


class OfferSend(BaseModel):
    """Optional e-mail to go out with the offer. No recipient → status only."""

    to: str | None = None
    subject: str | None = None
    message: str | None = None


class PriceQuoteRequest(_CamelModel):
    amount: int = Field(..., ge=0)
    vat_rate: int = Field(23, ge=0, alias="vatRate")
    discount_percent: int = Field(0, ge=0, le=100, alias="discountPercent")
