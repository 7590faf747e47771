"""Email records — persist first, then deliver.

Business Rules:
- The Email row is committed before any delivery attempt; a delivery
  failure never rolls it back
- status "sent" requested + SMTP not configured → the record stays draft and
  the outcome is reported as "not_configured" (not an error)
- status "sent" requested + delivery fails → status "failed", error stored,
  DeliveryError raised carrying the record id
- type "received" records incoming mail: never delivered, starts unread
- Read state (mark_read / mark_unread) only applies to the owner's records

Called by: routers/emails.py
Depends on: services/mailer.py, services/workflow.py, models
"""

from loguru import logger
from sqlalchemy.orm import Session

from ..database import utcnow
from ..models import Email
from .errors import DeliveryError, NotFoundError, ValidationError
from .mailer import SmtpMailer
from .workflow import check_transition

# Delivery outcomes reported next to the record
DELIVERED = "delivered"
NOT_CONFIGURED = "not_configured"
NOT_REQUESTED = "not_requested"


def get_for_user(db: Session, email_id: str, user_id: str) -> Email:
    email = db.get(Email, email_id)
    if email is None or email.user_id != user_id:
        raise NotFoundError("Email", email_id)
    return email


def list_for_user(db: Session, user_id: str, direction: str | None = None) -> list[Email]:
    q = db.query(Email).filter(Email.user_id == user_id)
    if direction:
        q = q.filter(Email.direction == direction)
    return q.order_by(Email.created_at.desc(), Email.id.desc()).all()


def deliver(db: Session, email: Email, mailer: SmtpMailer) -> str:
    """Try to transmit a persisted outgoing email and record the outcome.

    Returns DELIVERED or NOT_CONFIGURED; raises DeliveryError on failure
    after the failed status has been committed.
    """
    check_transition("email", email.status, "sent")
    if not mailer.is_configured():
        logger.info("Email {} kept as draft: SMTP not configured", email.id)
        return NOT_CONFIGURED

    result = mailer.send(email.to, email.subject, email.content or "")
    if result.success:
        email.status = "sent"
        email.sent_at = utcnow()
        email.error = None
        db.commit()
        return DELIVERED

    if email.status != "failed":
        check_transition("email", email.status, "failed")
        email.status = "failed"
    email.error = result.error
    db.commit()
    raise DeliveryError(f"Email delivery failed: {result.error}", record_id=email.id)


def create_email(db: Session, user_id: str, data: dict, mailer: SmtpMailer) -> tuple[Email, str]:
    """Persist an email and, if status "sent" was requested, deliver it.

    Returns (email, delivery outcome).
    """
    direction = data.get("type") or "sent"
    wants_send = direction == "sent" and data.get("status") == "sent"

    email = Email(
        to=data["to"],
        subject=data["subject"],
        content=data.get("content") or "",
        direction=direction,
        from_address=data.get("from_address"),
        user_id=user_id,
    )
    if direction == "received":
        # Incoming mail was delivered by definition; it is only unread
        email.status = "sent"
        email.is_read = False
    db.add(email)
    db.commit()
    db.refresh(email)

    if not wants_send:
        return email, NOT_REQUESTED
    return email, deliver(db, email, mailer)


def send_email(db: Session, email: Email, mailer: SmtpMailer) -> tuple[Email, str]:
    """Send a draft or re-attempt a failed email."""
    if email.direction != "sent":
        raise ValidationError("Received mail cannot be sent", {"type": "must be sent"})
    return email, deliver(db, email, mailer)


def mark_read(db: Session, email_id: str, user_id: str) -> Email:
    email = get_for_user(db, email_id, user_id)
    if not email.is_read:
        email.is_read = True
        email.read_at = utcnow()
        db.commit()
    return email


def mark_unread(db: Session, email_id: str, user_id: str) -> Email:
    email = get_for_user(db, email_id, user_id)
    if email.is_read:
        email.is_read = False
        email.read_at = None
        db.commit()
    return email


def delete_email(db: Session, email_id: str, user_id: str) -> None:
    email = get_for_user(db, email_id, user_id)
    db.delete(email)
    db.commit()


def email_to_dict(e: Email, delivery: str | None = None) -> dict:
    d = {
        "id": e.id,
        "to": e.to,
        "subject": e.subject,
        "content": e.content or "",
        "status": e.status,
        "type": e.direction,
        "from_address": e.from_address,
        "is_read": bool(e.is_read),
        "read_at": e.read_at.isoformat() if e.read_at else None,
        "sent_at": e.sent_at.isoformat() if e.sent_at else None,
        "error": e.error,
        "user_id": e.user_id,
        "created_at": e.created_at.isoformat() if e.created_at else None,
    }
    if delivery is not None:
        d["delivery"] = delivery
    return d
