"""
test_mailer.py — Tests for services/mailer.py (SmtpMailer)

smtplib is patched; no network traffic.

Called by: pytest
Depends on: crm/services/mailer.py
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from crm.services.mailer import NOT_CONFIGURED, SMTPConfig, SmtpMailer

CONFIG = SMTPConfig(host="smtp.test", port=587, user="crm@test", password="pw")


@pytest.fixture()
def smtp():
    with patch("crm.services.mailer.smtplib.SMTP") as cls:
        conn = MagicMock()
        conn.__enter__.return_value = conn
        conn.has_extn.return_value = True
        cls.return_value = conn
        yield cls, conn


class TestConfiguration:
    def test_unconfigured(self):
        m = SmtpMailer()
        assert not m.is_configured()
        assert m.status()["configured"] is False

    def test_configure_and_clear(self):
        m = SmtpMailer()
        m.configure(CONFIG)
        assert m.is_configured()
        assert m.status() == {"configured": True, "host": "smtp.test", "port": 587, "secure": False, "user": "crm@test"}
        m.configure(None)
        assert not m.is_configured()

    def test_status_never_exposes_password(self):
        assert "pw" not in str(SmtpMailer(CONFIG).status().values())

    def test_sender_defaults_to_user(self):
        assert CONFIG.sender == "crm@test"
        assert SMTPConfig("h", 25, "u", "p", from_address="CRM <no-reply@x>").sender == "CRM <no-reply@x>"


class TestSend:
    def test_not_configured_is_not_an_exception(self):
        result = SmtpMailer().send("a@b.pl", "Hi", "Body")
        assert result.success is False
        assert result.error == NOT_CONFIGURED

    def test_success(self, smtp):
        cls, conn = smtp
        result = SmtpMailer(CONFIG).send("client@firma.pl", "Oferta", "Treść\noferty")

        assert result.success is True
        assert result.message_id
        cls.assert_called_once_with("smtp.test", 587, timeout=15)
        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with("crm@test", "pw")
        msg = conn.send_message.call_args.args[0]
        assert msg["To"] == "client@firma.pl"
        assert msg["Subject"] == "Oferta"
        assert msg["From"] == "crm@test"

    def test_auth_failure_returns_error(self, smtp):
        _, conn = smtp
        conn.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        result = SmtpMailer(CONFIG).send("a@b.pl", "s", "c")
        assert result.success is False
        assert "bad credentials" in result.error
        conn.close.assert_called_once()

    def test_connection_refused_returns_error(self):
        with patch("crm.services.mailer.smtplib.SMTP", side_effect=ConnectionRefusedError("refused")):
            result = SmtpMailer(CONFIG).send("a@b.pl", "s", "c")
        assert result.success is False
        assert "refused" in result.error

    def test_secure_uses_smtp_ssl(self):
        config = SMTPConfig(host="smtp.test", port=465, user="u", password="p", secure=True)
        with patch("crm.services.mailer.smtplib.SMTP_SSL") as ssl_cls:
            conn = MagicMock()
            conn.__enter__.return_value = conn
            ssl_cls.return_value = conn
            assert SmtpMailer(config).send("a@b.pl", "s", "c").success
        assert ssl_cls.call_args.args == ("smtp.test", 465)


class TestConnection:
    def test_ok(self, smtp):
        _, conn = smtp
        assert SmtpMailer(CONFIG).test_connection().success
        conn.noop.assert_called_once()

    def test_not_configured(self):
        assert SmtpMailer().test_connection().error == NOT_CONFIGURED
