"""
schemas/responses.py — Shared response models

Called by: routers/*.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class OkResponse(BaseModel):
    ok: bool = True


class CountResponse(BaseModel):
    count: int = 0


class PriceQuoteResponse(BaseModel):
    amount: int
    discount_percent: int
    vat_rate: int
    discount: int
    discounted: int
    vat: int
    final_amount: int


class SearchResponse(BaseModel):
    query: str
    total: int = 0
    results: list[dict] = Field(default_factory=list)


class StatsResponse(BaseModel):
    contractors: int = 0
    active_tasks: int = 0
    open_tickets: int = 0
    sent_offers: int = 0
