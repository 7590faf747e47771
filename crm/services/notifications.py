"""Notification service — in-app notifications for lifecycle events.

notify() is a best-effort side channel. Callers commit the triggering
contractor / task / offer / ticket change first; the notification is then
written in its own transaction and a failure rolls back only that.

Retention: each user keeps at most NOTIFICATION_RETENTION_LIMIT
notifications. Beyond that the oldest *read* ones are pruned after every
append; unread notifications are never pruned.

Usage:
    from crm.services.notifications import notify
    notify(db, user.id, f"Contractor {c.name} added", "success")
"""

import logging

from sqlalchemy.orm import Session

from ..config import settings
from ..database import utcnow
from ..models import Notification
from .errors import NotFoundError, ValidationError

log = logging.getLogger("crm.notifications")

NOTIFICATION_TYPES = ("info", "success", "warning", "error")


def notify(
    db: Session,
    user_id: str | None,
    message: str,
    type: str = "info",
) -> Notification | None:
    """Append a notification for ``user_id``. Never raises.

    Call it after the triggering change has been committed.
    """
    if type not in NOTIFICATION_TYPES:
        type = "info"
    try:
        n = Notification(message=message, type=type, user_id=user_id)
        db.add(n)
        db.flush()
        _prune(db, user_id)
        db.commit()
        return n
    except Exception as e:
        db.rollback()
        log.warning("Notification for user %s dropped: %s", user_id, e)
        return None


def _prune(db: Session, user_id: str | None) -> int:
    limit = settings.notification_retention_limit
    if limit <= 0:
        return 0
    total = db.query(Notification).filter(Notification.user_id == user_id).count()
    excess = total - limit
    if excess <= 0:
        return 0
    stale = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(True))
        .order_by(Notification.created_at.asc(), Notification.id.asc())
        .limit(excess)
        .all()
    )
    for n in stale:
        db.delete(n)
    if stale:
        log.debug("Pruned %d read notifications for user %s", len(stale), user_id)
    return len(stale)


def create_notification(db: Session, user_id: str, message: str, type: str = "info") -> Notification:
    """Explicit create from the API. Unlike notify(), errors propagate."""
    message = (message or "").strip()
    if not message:
        raise ValidationError("Notification message is required", {"message": "required"})
    if type not in NOTIFICATION_TYPES:
        raise ValidationError("Invalid notification type", {"type": f"one of {', '.join(NOTIFICATION_TYPES)}"})
    n = Notification(message=message, type=type, user_id=user_id)
    db.add(n)
    db.flush()
    _prune(db, user_id)
    db.commit()
    db.refresh(n)
    return n


def list_for_user(db: Session, user_id: str, unread_only: bool = False) -> list[Notification]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.read.is_(False))
    return q.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .count()
    )


def mark_read(db: Session, notification_id: str, user_id: str) -> Notification:
    n = db.get(Notification, notification_id)
    if n is None or n.user_id != user_id:
        raise NotFoundError("Notification", notification_id)
    if not n.read:
        n.read = True
        n.read_at = utcnow()
        db.commit()
    return n


def mark_all_read(db: Session, user_id: str) -> int:
    """Mark every unread notification of ``user_id`` read. Returns the count."""
    now = utcnow()
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True, Notification.read_at: now}, synchronize_session="fetch")
    )
    db.commit()
    return updated
