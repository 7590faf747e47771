"""
test_offer_service.py — Tests for services/offer_service.py

Covers server-side pricing on create/update, contractor name resolution,
send (status and e-mail as independent outcomes) and decisions.

Called by: pytest
Depends on: crm/services/offer_service.py, tests/conftest.py
"""

import pytest

from crm.models import Notification
from crm.services import offer_service as svc
from crm.services.errors import IllegalTransitionError, NotFoundError, ValidationError
from crm.services.mailer import DeliveryResult


class TestCreate:
    def test_prices_server_side(self, db_session, test_user, test_contractor):
        offer = svc.create_offer(db_session, {
            "contractor_id": test_contractor.id,
            "title": "Dach",
            "amount": 15000,
            "final_amount": 1,
        }, test_user.id)
        assert offer.final_amount == 18450
        assert offer.vat_rate == 23
        assert offer.discount_percent == 0
        assert offer.status == "draft"

    def test_fills_contractor_name(self, db_session, test_user, test_contractor):
        offer = svc.create_offer(
            db_session, {"contractor_id": test_contractor.id, "title": "T", "amount": 1}, test_user.id
        )
        assert offer.contractor_name == "Kowalski Budownictwo"

    def test_free_text_contractor(self, db_session, test_user):
        offer = svc.create_offer(db_session, {"contractor_name": "Walk-in", "title": "T", "amount": 100}, test_user.id)
        assert offer.contractor_id is None
        assert offer.final_amount == 123

    def test_requires_a_contractor(self, db_session, test_user):
        with pytest.raises(ValidationError):
            svc.create_offer(db_session, {"title": "T", "amount": 100}, test_user.id)

    def test_unknown_contractor_id(self, db_session, test_user):
        with pytest.raises(NotFoundError):
            svc.create_offer(db_session, {"contractor_id": "nope", "title": "T", "amount": 100}, test_user.id)

    def test_create_as_sent_sets_sent_at(self, db_session, test_user):
        offer = svc.create_offer(
            db_session, {"contractor_name": "X", "title": "T", "amount": 100, "status": "sent"}, test_user.id
        )
        assert offer.status == "sent"
        assert offer.sent_at is not None

    def test_notifies_creator(self, db_session, test_user):
        svc.create_offer(db_session, {"contractor_name": "X", "title": "Dach", "amount": 1}, test_user.id)
        [n] = db_session.query(Notification).filter_by(user_id=test_user.id).all()
        assert "Dach" in n.message


class TestUpdate:
    def test_reprices_on_amount_change(self, db_session, test_user, test_offer):
        svc.update_offer(db_session, test_offer, {"amount": 15000, "discount_percent": 0}, test_user.id)
        assert test_offer.final_amount == 18450

    def test_ignores_client_final_amount(self, db_session, test_user, test_offer):
        svc.update_offer(db_session, test_offer, {"final_amount": 5, "notes": "x"}, test_user.id)
        assert test_offer.final_amount == 11070

    def test_unchanged_status_is_not_a_transition(self, db_session, test_user, test_offer):
        svc.update_offer(db_session, test_offer, {"status": "draft", "title": "New"}, test_user.id)
        assert test_offer.title == "New"
        assert test_offer.status == "draft"

    def test_illegal_status_change_rejected(self, db_session, test_user, test_offer):
        with pytest.raises(IllegalTransitionError):
            svc.update_offer(db_session, test_offer, {"status": "accepted"}, test_user.id)


class TestSend:
    def test_marks_sent_and_emails_contractor(self, db_session, test_user, test_offer, mock_mailer):
        offer, delivery = svc.send_offer(db_session, test_offer, mock_mailer, test_user.id)
        assert offer.status == "sent"
        assert offer.sent_at is not None
        assert delivery == {"attempted": True, "success": True, "recipient": "biuro@kowalski.pl", "error": None}
        to, subject, body = mock_mailer.send.call_args.args
        assert to == "biuro@kowalski.pl"
        assert "Remont biura" in subject
        assert "Total: 11070 PLN" in body

    def test_email_failure_keeps_sent_status(self, db_session, test_user, test_offer, mock_mailer):
        mock_mailer.send.return_value = DeliveryResult(False, error="relay denied")
        offer, delivery = svc.send_offer(db_session, test_offer, mock_mailer, test_user.id)
        assert offer.status == "sent"
        assert delivery["attempted"] is True
        assert delivery["success"] is False
        assert delivery["error"] == "relay denied"

    def test_not_configured_is_reported(self, db_session, test_user, test_offer, mock_mailer):
        mock_mailer.is_configured.return_value = False
        offer, delivery = svc.send_offer(db_session, test_offer, mock_mailer, test_user.id)
        assert offer.status == "sent"
        assert delivery["attempted"] is False
        assert delivery["error"] == "SMTP is not configured"

    def test_explicit_recipient(self, db_session, test_user, test_offer, mock_mailer):
        _, delivery = svc.send_offer(db_session, test_offer, mock_mailer, test_user.id, to="boss@kowalski.pl")
        assert delivery["recipient"] == "boss@kowalski.pl"

    def test_second_send_rejected(self, db_session, test_user, test_offer, mock_mailer):
        svc.send_offer(db_session, test_offer, mock_mailer, test_user.id)
        with pytest.raises(IllegalTransitionError):
            svc.send_offer(db_session, test_offer, mock_mailer, test_user.id)
        assert mock_mailer.send.call_count == 1


class TestDecide:
    def test_accept_after_send(self, db_session, test_user, test_offer, mock_mailer):
        svc.send_offer(db_session, test_offer, mock_mailer, test_user.id)
        offer = svc.decide_offer(db_session, test_offer, "accepted", test_user.id)
        assert offer.status == "accepted"
        assert offer.decided_at is not None

    def test_accept_draft_rejected(self, db_session, test_user, test_offer):
        with pytest.raises(IllegalTransitionError):
            svc.decide_offer(db_session, test_offer, "accepted", test_user.id)

    def test_serialization(self, test_offer):
        d = svc.offer_to_dict(test_offer)
        assert d["final_amount"] == 11070
        assert d["valid_until"] == "2099-12-31"
        assert d["payment_terms"] == "14 dni"
        assert d["category"] == "Standardowa"
