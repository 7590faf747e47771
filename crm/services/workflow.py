"""Status workflow rules — transition guards for offers, tickets, tasks, emails.

Business Rules:
- Offer:  draft → sent (sets sent_at); sent → accepted | rejected (terminal);
          draft | sent → expired (terminal)
- Ticket: open → in_progress → resolved; open → resolved; resolved is terminal
- Task:   pending ↔ completed
- Email:  draft → sent | failed; failed → sent (retry)
- A transition to the current status is not a transition and is rejected;
  generic updates skip the guard when the status is unchanged
- Offers past valid_until expire lazily: expire_overdue_offers() runs before
  offers are read and persists the change

Called by: services/offer_service.py, routers/tasks.py, routers/support.py,
           services/email_service.py
Depends on: models, services/errors.py
"""

from datetime import date

from loguru import logger
from sqlalchemy.orm import Session

from ..database import utcnow
from ..models import Offer, SupportTicket, Task
from .errors import IllegalTransitionError, ValidationError

OFFER_STATUSES = ("draft", "sent", "accepted", "rejected", "expired")
TICKET_STATUSES = ("open", "in_progress", "resolved")

TRANSITIONS: dict[str, dict[str, frozenset[str]]] = {
    "offer": {
        "draft": frozenset({"sent", "expired"}),
        "sent": frozenset({"accepted", "rejected", "expired"}),
        "accepted": frozenset(),
        "rejected": frozenset(),
        "expired": frozenset(),
    },
    "ticket": {
        "open": frozenset({"in_progress", "resolved"}),
        "in_progress": frozenset({"resolved"}),
        "resolved": frozenset(),
    },
    "task": {
        "pending": frozenset({"completed"}),
        "completed": frozenset({"pending"}),
    },
    "email": {
        "draft": frozenset({"sent", "failed"}),
        "sent": frozenset({"failed"}),
        "failed": frozenset({"sent"}),
    },
}

_ENTITY_NAMES = {"offer": "offer", "ticket": "support ticket", "task": "task", "email": "email"}


def allowed_targets(kind: str, current: str) -> frozenset[str]:
    return TRANSITIONS[kind].get(current, frozenset())


def check_transition(kind: str, current: str, target: str) -> None:
    """Raise unless ``current → target`` is a legal transition for ``kind``."""
    table = TRANSITIONS[kind]
    if target not in table:
        raise ValidationError(
            f"Unknown {_ENTITY_NAMES[kind]} status '{target}'",
            {"status": f"one of {', '.join(table)}"},
        )
    if target not in allowed_targets(kind, current):
        raise IllegalTransitionError(_ENTITY_NAMES[kind], current, target)


# ── Offer ─────────────────────────────────────────────────────────────


def apply_offer_transition(offer: Offer, target: str) -> Offer:
    """Move an offer to ``target``, stamping sent_at / decided_at."""
    check_transition("offer", offer.status, target)
    now = utcnow()
    if target == "sent":
        offer.sent_at = now
    elif target in ("accepted", "rejected"):
        offer.decided_at = now
    offer.status = target
    return offer


def expire_overdue_offers(db: Session, today: date | None = None) -> list[Offer]:
    """Persist ``expired`` on every draft/sent offer whose valid_until has passed."""
    today = today or date.today()
    candidates = (
        db.query(Offer)
        .filter(
            Offer.status.in_(("draft", "sent")),
            Offer.valid_until.isnot(None),
            Offer.valid_until < today,
        )
        .all()
    )
    for offer in candidates:
        apply_offer_transition(offer, "expired")
    if candidates:
        db.commit()
        logger.info("Expired {} overdue offers", len(candidates))
    return candidates


# ── Support ticket ────────────────────────────────────────────────────


def apply_ticket_transition(ticket: SupportTicket, target: str) -> SupportTicket:
    check_transition("ticket", ticket.status, target)
    if target == "resolved":
        ticket.resolved_at = utcnow()
    ticket.status = target
    return ticket


# ── Task ──────────────────────────────────────────────────────────────


def apply_task_transition(task: Task, target: str) -> Task:
    check_transition("task", task.status, target)
    task.completed_at = utcnow() if target == "completed" else None
    task.status = target
    return task


def toggle_task(task: Task) -> Task:
    return apply_task_transition(task, "pending" if task.status == "completed" else "completed")
