"""
test_schemas.py — Tests for request schema validation, normalisation and error bodies

Called by: pytest
Depends on: crm/schemas/
"""

from datetime import date

import pytest
from pydantic import ValidationError

from crm.schemas.auth import LoginRequest, UserCreate
from crm.schemas.crm import ContractorCreate, OfferCreate, OfferUpdate, TaskCreate
from crm.schemas.emails import EmailCreate, SmtpConfigure
from crm.schemas.errors import ErrorResponse, field_errors
from crm.schemas.support import TicketCreate


class TestContractor:
    def test_strips_nip_separators(self):
        c = ContractorCreate(name="A", email="a@b.pl", phone="1", nip="123 456-32-18")
        assert c.nip == "1234563218"

    def test_accepts_camel_case(self):
        c = ContractorCreate(name="A", email="a@b.pl", phone="1", accountNumber="PL61", postalCode="30-001")
        assert c.account_number == "PL61"
        assert c.postal_code == "30-001"

    @pytest.mark.parametrize("field", ["name", "email", "phone"])
    def test_blank_required_field(self, field):
        data = {"name": "A", "email": "a@b.pl", "phone": "1", field: "  "}
        with pytest.raises(ValidationError):
            ContractorCreate(**data)


class TestTask:
    def test_normalises_date_and_time(self):
        t = TaskCreate(title="x", date="2026-11-02T10:00:00Z", time="7:30")
        assert t.date == "2026-11-02"
        assert t.time == "07:30"

    @pytest.mark.parametrize("time", ["25:00", "noon"])
    def test_bad_time(self, time):
        with pytest.raises(ValidationError):
            TaskCreate(title="x", date="2026-11-02", time=time)


class TestOffer:
    def test_defaults(self):
        o = OfferCreate(contractorName="X", title="T", amount=100)
        assert o.vat_rate == 23
        assert o.discount_percent == 0
        assert o.currency == "PLN"
        assert o.status == "draft"

    def test_loose_valid_until(self):
        assert OfferCreate(contractorName="X", title="T", amount=1, validUntil="").valid_until is None
        o = OfferCreate(contractorName="X", title="T", amount=1, validUntil="2026-12-31T00:00:00.000Z")
        assert o.valid_until == date(2026, 12, 31)

    def test_currency_is_upper_cased(self):
        assert OfferCreate(contractorName="X", title="T", amount=1, currency="eur").currency == "EUR"
        with pytest.raises(ValidationError):
            OfferCreate(contractorName="X", title="T", amount=1, currency="EURO")

    def test_vat_has_no_upper_bound(self):
        assert OfferCreate(contractorName="X", title="T", amount=1, vatRate=150).vat_rate == 150

    @pytest.mark.parametrize("field,value", [("amount", -1), ("vatRate", -1), ("discountPercent", 101)])
    def test_ranges(self, field, value):
        data = {"contractorName": "X", "title": "T", "amount": 1, field: value}
        with pytest.raises(ValidationError):
            OfferCreate(**data)

    def test_create_cannot_start_decided(self):
        with pytest.raises(ValidationError):
            OfferCreate(contractorName="X", title="T", amount=1, status="accepted")

    def test_update_is_partial(self):
        assert OfferUpdate(notes="x").model_dump(exclude_unset=True) == {"notes": "x"}


class TestMisc:
    def test_email_from_alias(self):
        e = EmailCreate(to="a@b.pl", subject="s", type="received", **{"from": "c@d.pl"})
        assert e.from_address == "c@d.pl"

    def test_smtp_port_range(self):
        with pytest.raises(ValidationError):
            SmtpConfigure(host="h", port=0)

    def test_login_token_alias(self):
        assert LoginRequest(username="a", password="b", recaptchaToken="t").recaptcha_token == "t"

    def test_password_min_length(self):
        with pytest.raises(ValidationError):
            UserCreate(username="a", password="1234567", email="a@b.pl")

    def test_ticket_priority(self):
        with pytest.raises(ValidationError):
            TicketCreate(user="a", issue="b", priority="urgent")


class TestErrorResponse:
    def test_field_errors_keep_loc_msg_type(self):
        [item] = field_errors([{"loc": ("body", "amount"), "msg": "bad", "type": "int_parsing", "ctx": {"x": object()}}])
        assert item.model_dump() == {"loc": ["body", "amount"], "msg": "bad", "type": "int_parsing"}

    def test_dump_with_field_list(self):
        body = ErrorResponse(error="Validation error", status_code=422, detail=field_errors([{"loc": ("query", 0)}]))
        assert body.model_dump()["detail"] == [{"loc": ["query", 0], "msg": "", "type": ""}]

    def test_dump_with_record_id(self):
        body = ErrorResponse(error="Email delivery failed", status_code=502, detail={"record_id": "abc"})
        assert body.model_dump() == {
            "error": "Email delivery failed", "status_code": 502, "request_id": "", "detail": {"record_id": "abc"},
        }
