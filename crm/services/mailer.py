"""Outbound mail delivery over SMTP.

SmtpMailer is the delivery collaborator: send() returns a DeliveryResult
instead of raising, so callers decide what a failure means for their record.
"Not configured" is a normal state, not an error; callers check
is_configured() and leave records in draft.

Configuration comes from SMTP_* settings at import time and can be replaced
at runtime by an admin through /api/smtp/configure (kept in memory only).

Usage:
    from crm.services.mailer import mailer
    if mailer.is_configured():
        result = mailer.send(to, subject, content)
"""

import html
import smtplib
import ssl
import threading
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid

from loguru import logger

from ..config import settings


@dataclass(frozen=True)
class SMTPConfig:
    host: str
    port: int
    user: str
    password: str
    secure: bool = False
    from_address: str = ""

    @property
    def sender(self) -> str:
        return self.from_address or self.user


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    message_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {"success": self.success, "message_id": self.message_id, "error": self.error}


NOT_CONFIGURED = "SMTP is not configured"


def _html_body(content: str) -> str:
    return html.escape(content).replace("\n", "<br>")


class SmtpMailer:
    def __init__(self, config: SMTPConfig | None = None, timeout: float = 15):
        self._config = config
        self._timeout = timeout
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "SmtpMailer":
        config = None
        if settings.smtp_configured:
            config = SMTPConfig(
                host=settings.smtp_host,
                port=settings.smtp_port,
                user=settings.smtp_user,
                password=settings.smtp_password,
                secure=settings.smtp_secure,
                from_address=settings.smtp_from_address,
            )
        return cls(config, timeout=settings.smtp_timeout_seconds)

    def configure(self, config: SMTPConfig | None) -> None:
        with self._lock:
            self._config = config
        if config:
            logger.info("SMTP configured: {}:{} as {}", config.host, config.port, config.user)
        else:
            logger.info("SMTP configuration cleared")

    @property
    def config(self) -> SMTPConfig | None:
        return self._config

    def is_configured(self) -> bool:
        return self._config is not None

    def status(self) -> dict:
        c = self._config
        return {
            "configured": c is not None,
            "host": c.host if c else None,
            "port": c.port if c else None,
            "secure": c.secure if c else False,
            "user": c.user if c else None,
        }

    def _connect(self, config: SMTPConfig) -> smtplib.SMTP:
        if config.secure:
            conn = smtplib.SMTP_SSL(
                config.host, config.port, timeout=self._timeout,
                context=ssl.create_default_context(),
            )
        else:
            conn = smtplib.SMTP(config.host, config.port, timeout=self._timeout)
            conn.ehlo()
            if conn.has_extn("starttls"):
                conn.starttls(context=ssl.create_default_context())
                conn.ehlo()
        try:
            conn.login(config.user, config.password)
        except smtplib.SMTPException:
            conn.close()
            raise
        return conn

    def send(self, to: str, subject: str, content: str, from_address: str | None = None) -> DeliveryResult:
        config = self._config
        if config is None:
            return DeliveryResult(False, error=NOT_CONFIGURED)

        msg = EmailMessage()
        msg["From"] = from_address or config.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid()
        msg.set_content(content or "")
        msg.add_alternative(_html_body(content or ""), subtype="html")

        try:
            with self._connect(config) as conn:
                conn.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP delivery to {} failed: {}", to, e)
            return DeliveryResult(False, error=str(e) or e.__class__.__name__)

        logger.info("Email '{}' delivered to {}", subject, to)
        return DeliveryResult(True, message_id=msg["Message-ID"])

    def test_connection(self) -> DeliveryResult:
        config = self._config
        if config is None:
            return DeliveryResult(False, error=NOT_CONFIGURED)
        try:
            with self._connect(config) as conn:
                conn.noop()
        except (smtplib.SMTPException, OSError) as e:
            return DeliveryResult(False, error=str(e) or e.__class__.__name__)
        return DeliveryResult(True)


mailer = SmtpMailer.from_settings()


def get_mailer() -> SmtpMailer:
    """FastAPI dependency returning the process-wide mailer."""
    return mailer
