"""Offer lifecycle — server-side pricing, send, decide.

Business Rules:
- final_amount is always computed here from (amount, discount_percent,
  vat_rate); a client-supplied value never reaches the database
- contractor_name is copied from the contractor when only contractor_id is
  given; one of the two is required
- Status changes go through workflow.apply_offer_transition; a generic update
  carrying the current status is not a transition
- send_offer: marking the offer sent and e-mailing it are independent
  outcomes. The offer stays sent even if the e-mail fails; the delivery
  result is reported next to it

Called by: routers/offers.py
Depends on: services/pricing.py, services/workflow.py, services/mailer.py,
            services/notifications.py, models
"""

from loguru import logger
from sqlalchemy.orm import Session

from ..models import Contractor, Offer
from .errors import ValidationError
from .mailer import SmtpMailer
from .notifications import notify
from .pricing import calculate_final_amount
from .store import EntityStore
from .workflow import apply_offer_transition

_PRICING_FIELDS = ("amount", "discount_percent", "vat_rate")

DECISIONS = {
    "accepted": ("Offer '{}' accepted", "success"),
    "rejected": ("Offer '{}' rejected", "warning"),
    "expired": ("Offer '{}' expired", "info"),
}


def _resolve_contractor(db: Session, data: dict) -> None:
    """Fill contractor_name from contractor_id, in place."""
    contractor_id = data.get("contractor_id")
    if contractor_id:
        contractor = EntityStore(db).get(Contractor, contractor_id)
        if not data.get("contractor_name"):
            data["contractor_name"] = contractor.name


def create_offer(db: Session, data: dict, user_id: str | None = None) -> Offer:
    data = dict(data)
    data.pop("final_amount", None)
    target = data.pop("status", None) or "draft"

    _resolve_contractor(db, data)
    if not data.get("contractor_name"):
        raise ValidationError("Offer needs a contractor", {"contractor_name": "required"})

    data["final_amount"] = calculate_final_amount(
        data["amount"], data.get("discount_percent", 0), data.get("vat_rate", 23)
    )
    data["status"] = "draft"
    offer = EntityStore(db).create(Offer, data, commit=False)
    if target != "draft":
        apply_offer_transition(offer, target)
    db.commit()
    db.refresh(offer)

    logger.info("Offer {} created for {} ({} {})", offer.id, offer.contractor_name, offer.final_amount, offer.currency)
    notify(db, user_id, f"New offer '{offer.title}' for {offer.contractor_name}", "success")
    return offer


def update_offer(db: Session, offer: Offer, changes: dict, user_id: str | None = None) -> Offer:
    changes = {k: v for k, v in changes.items() if k != "final_amount"}
    target = changes.pop("status", None)

    if "contractor_id" in changes:
        _resolve_contractor(db, changes)

    store = EntityStore(db)
    store.update(offer, changes, commit=False)
    if any(f in changes for f in _PRICING_FIELDS):
        offer.final_amount = calculate_final_amount(offer.amount, offer.discount_percent, offer.vat_rate)

    transitioned = target is not None and target != offer.status
    if transitioned:
        apply_offer_transition(offer, target)
    db.commit()
    db.refresh(offer)

    if transitioned and target in DECISIONS:
        message, kind = DECISIONS[target]
        notify(db, user_id, message.format(offer.title), kind)
    return offer


def decide_offer(db: Session, offer: Offer, status: str, user_id: str | None = None) -> Offer:
    """Record the customer's answer (accepted / rejected) or expire the offer."""
    apply_offer_transition(offer, status)
    db.commit()
    db.refresh(offer)
    logger.info("Offer {} → {}", offer.id, status)

    message, kind = DECISIONS.get(status, ("Offer '{}' updated", "info"))
    notify(db, user_id, message.format(offer.title), kind)
    return offer


def _offer_email(offer: Offer, message: str | None) -> str:
    lines = [message.strip(), ""] if message and message.strip() else []
    lines += [
        offer.title,
        "",
        offer.description or "",
        "",
        f"Net amount: {offer.amount} {offer.currency}",
    ]
    if offer.discount_percent:
        lines.append(f"Discount: {offer.discount_percent}%")
    lines += [
        f"VAT: {offer.vat_rate}%",
        f"Total: {offer.final_amount} {offer.currency}",
    ]
    if offer.valid_until:
        lines.append(f"Valid until: {offer.valid_until.isoformat()}")
    if offer.payment_terms:
        lines.append(f"Payment terms: {offer.payment_terms}")
    return "\n".join(lines)


def send_offer(
    db: Session,
    offer: Offer,
    mailer: SmtpMailer,
    user_id: str | None = None,
    to: str | None = None,
    subject: str | None = None,
    message: str | None = None,
) -> tuple[Offer, dict]:
    """Mark the offer sent, then (optionally) e-mail it.

    Returns (offer, delivery) where delivery is
    {"attempted", "success", "recipient", "error"}.
    """
    apply_offer_transition(offer, "sent")
    db.commit()
    db.refresh(offer)
    logger.info("Offer {} marked sent", offer.id)

    recipient = to or (offer.contractor.email if offer.contractor else None)
    delivery = {"attempted": False, "success": False, "recipient": recipient, "error": None}

    if recipient and mailer.is_configured():
        result = mailer.send(
            recipient,
            subject or f"Offer: {offer.title}",
            _offer_email(offer, message),
        )
        delivery.update(attempted=True, success=result.success, error=result.error)
    elif recipient:
        delivery["error"] = "SMTP is not configured"
    else:
        delivery["error"] = "No recipient address"

    if delivery["attempted"] and not delivery["success"]:
        notify(db, user_id, f"Offer '{offer.title}' marked sent, but the e-mail failed", "warning")
    else:
        notify(db, user_id, f"Offer '{offer.title}' sent to {offer.contractor_name}", "info")
    return offer, delivery


def offer_to_dict(o: Offer) -> dict:
    return {
        "id": o.id,
        "contractor_id": o.contractor_id,
        "contractor_name": o.contractor_name,
        "title": o.title,
        "description": o.description,
        "amount": o.amount,
        "vat_rate": o.vat_rate,
        "discount_percent": o.discount_percent,
        "final_amount": o.final_amount,
        "currency": o.currency,
        "valid_until": o.valid_until.isoformat() if o.valid_until else None,
        "payment_terms": o.payment_terms,
        "category": o.category,
        "notes": o.notes,
        "status": o.status,
        "sent_at": o.sent_at.isoformat() if o.sent_at else None,
        "decided_at": o.decided_at.isoformat() if o.decided_at else None,
        "created_at": o.created_at.isoformat() if o.created_at else None,
    }
