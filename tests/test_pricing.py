"""
test_pricing.py — Tests for services/pricing.py

Covers the net → discount → VAT → gross calculation, its rounding rules
(floor on the discount, half-up on the gross value) and input validation.

Called by: pytest
Depends on: crm/services/pricing.py
"""

import pytest

from crm.services.errors import ValidationError
from crm.services.pricing import calculate_final_amount, price_breakdown


class TestCalculateFinalAmount:
    def test_no_discount(self):
        assert calculate_final_amount(15000, 0, 23) == 18450

    def test_ten_percent_discount(self):
        assert calculate_final_amount(10000, 10, 23) == 11070

    def test_defaults_to_23_percent_vat(self):
        assert calculate_final_amount(100) == 123

    def test_zero_vat(self):
        assert calculate_final_amount(999, 0, 0) == 999

    def test_full_discount(self):
        assert calculate_final_amount(5000, 100, 23) == 0

    def test_zero_amount(self):
        assert calculate_final_amount(0, 50, 23) == 0

    def test_discount_is_floored(self):
        # 999 * 15% = 149.85 → discount 149, base 850
        b = price_breakdown(999, 15, 0)
        assert b.discount == 149
        assert b.discounted == 850
        assert b.final_amount == 850

    def test_gross_rounds_half_up(self):
        # 50 * 1.23 = 61.5 → 62
        assert calculate_final_amount(50, 0, 23) == 62
        # 10 * 1.05 = 10.5 → 11
        assert calculate_final_amount(10, 0, 5) == 11

    def test_gross_rounds_down_below_half(self):
        # 1 * 1.23 = 1.23 → 1
        assert calculate_final_amount(1, 0, 23) == 1

    @pytest.mark.parametrize("amount", [0, 1, 7, 99, 1234, 10**9])
    @pytest.mark.parametrize("discount", [0, 1, 33, 99, 100])
    @pytest.mark.parametrize("vat", [0, 5, 8, 23])
    def test_vat_never_reduces_discounted_base(self, amount, discount, vat):
        final = calculate_final_amount(amount, discount, vat)
        assert final >= 0
        assert final >= amount * (100 - discount) / 100 - 1e-9


class TestPriceBreakdown:
    def test_all_parts(self):
        b = price_breakdown(10000, 10, 23)
        assert b.amount == 10000
        assert b.discount == 1000
        assert b.discounted == 9000
        assert b.vat == 2070
        assert b.final_amount == 11070

    def test_vat_is_gross_minus_base(self):
        b = price_breakdown(50, 0, 23)
        assert b.vat == b.final_amount - b.discounted == 12


class TestValidation:
    def test_negative_amount(self):
        with pytest.raises(ValidationError) as exc:
            calculate_final_amount(-1, 0, 23)
        assert "amount" in exc.value.fields

    def test_discount_out_of_range(self):
        with pytest.raises(ValidationError) as exc:
            calculate_final_amount(100, 101, 23)
        assert "discount_percent" in exc.value.fields

    def test_negative_discount(self):
        with pytest.raises(ValidationError):
            calculate_final_amount(100, -5, 23)

    def test_negative_vat(self):
        with pytest.raises(ValidationError) as exc:
            calculate_final_amount(100, 0, -1)
        assert "vat_rate" in exc.value.fields

    def test_float_rejected(self):
        with pytest.raises(ValidationError):
            calculate_final_amount(100.5, 0, 23)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError):
            calculate_final_amount(True, 0, 23)

    def test_reports_every_bad_field(self):
        with pytest.raises(ValidationError) as exc:
            calculate_final_amount(-1, 200, -3)
        assert set(exc.value.fields) == {"amount", "discount_percent", "vat_rate"}
