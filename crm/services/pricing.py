"""Offer pricing — net amount → discount → VAT → gross amount.

All values are integers in the offer currency's smallest unit as entered
(the app does not care whether that is grosze or złote).

Rounding:
- the discount is truncated (floor), so the discounted base never drops
  below the exact value
- the gross value is rounded half-up
Both rules affect the last unit of currency and must not change.
"""

from dataclasses import dataclass

from .errors import ValidationError

DEFAULT_VAT_RATE = 23


@dataclass(frozen=True)
class PriceBreakdown:
    amount: int
    discount_percent: int
    vat_rate: int
    discount: int
    discounted: int
    vat: int
    final_amount: int


def _check_inputs(amount: int, discount_percent: int, vat_rate: int) -> None:
    fields = {}
    for name, value in (
        ("amount", amount),
        ("discount_percent", discount_percent),
        ("vat_rate", vat_rate),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            fields[name] = "must be an integer"
    if fields:
        raise ValidationError("Invalid pricing input", fields)

    if amount < 0:
        fields["amount"] = "must not be negative"
    if not 0 <= discount_percent <= 100:
        fields["discount_percent"] = "must be between 0 and 100"
    if vat_rate < 0:
        fields["vat_rate"] = "must not be negative"
    if fields:
        raise ValidationError("Invalid pricing input", fields)


def price_breakdown(amount: int, discount_percent: int = 0, vat_rate: int = DEFAULT_VAT_RATE) -> PriceBreakdown:
    """Compute every intermediate value of the offer price."""
    _check_inputs(amount, discount_percent, vat_rate)

    discount = amount * discount_percent // 100
    discounted = amount - discount
    # round-half-up of discounted * (100 + vat) / 100, in integers
    final_amount = (discounted * (100 + vat_rate) + 50) // 100
    return PriceBreakdown(
        amount=amount,
        discount_percent=discount_percent,
        vat_rate=vat_rate,
        discount=discount,
        discounted=discounted,
        vat=final_amount - discounted,
        final_amount=final_amount,
    )


def calculate_final_amount(amount: int, discount_percent: int = 0, vat_rate: int = DEFAULT_VAT_RATE) -> int:
    """Gross payable amount for an offer.

    >>> calculate_final_amount(10000, 10, 23)
    11070
    """
    return price_breakdown(amount, discount_percent, vat_rate).final_amount
