"""Dashboard statistics and analytics aggregates.

Business Rules:
- Dashboard "active tasks" are pending tasks; "sent offers" are offers
  awaiting an answer
- Analytics range is in days (default 30, clamped to 1–365)
- tasks_over_time has one bucket per calendar month the range touches,
  at most the latest 6, oldest first, keyed "YYYY-MM"; a bucket counts tasks
  created in that month within the range and how many of those are now completed
- Status breakdowns always list every status, zeros included
- Overdue offers are expired first, so "sent" counts match /api/offers

Called by: routers/stats.py
Depends on: models, services/workflow.py
"""

from datetime import timedelta

from sqlalchemy import func as sqlfunc
from sqlalchemy.orm import Session

from ..database import utcnow
from ..models import Contractor, Email, Offer, SupportTicket, Task
from .workflow import OFFER_STATUSES, TICKET_STATUSES, expire_overdue_offers

DEFAULT_RANGE_DAYS = 30
MAX_RANGE_DAYS = 365
MAX_MONTHS = 6
CONTRACTOR_STATUSES = ("active", "inactive")


def _count(db: Session, model, *criteria) -> int:
    q = db.query(sqlfunc.count(model.id))
    if criteria:
        q = q.filter(*criteria)
    return q.scalar() or 0


def _by_status(db: Session, model, statuses) -> list[dict]:
    rows = dict(db.query(model.status, sqlfunc.count(model.id)).group_by(model.status).all())
    return [{"status": s, "count": rows.get(s, 0)} for s in statuses]


def dashboard_stats(db: Session) -> dict:
    expire_overdue_offers(db)
    return {
        "contractors": _count(db, Contractor),
        "active_tasks": _count(db, Task, Task.status == "pending"),
        "open_tickets": _count(db, SupportTicket, SupportTicket.status == "open"),
        "sent_offers": _count(db, Offer, Offer.status == "sent"),
    }


def parse_range(raw) -> int:
    """'90' → 90; junk or empty → DEFAULT_RANGE_DAYS."""
    try:
        days = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_RANGE_DAYS
    if days <= 0:
        return DEFAULT_RANGE_DAYS
    return min(days, MAX_RANGE_DAYS)


def _month_keys(since, now) -> list[str]:
    """Calendar months from ``since`` through ``now``, the latest MAX_MONTHS kept."""
    keys = []
    year, month = since.year, since.month
    while (year, month) <= (now.year, now.month):
        keys.append(f"{year:04d}-{month:02d}")
        month += 1
        if month == 13:
            year, month = year + 1, 1
    return keys[-MAX_MONTHS:]


def tasks_over_time(db: Session, range_days: int, now=None) -> list[dict]:
    now = now or utcnow()
    since = now - timedelta(days=range_days)
    keys = _month_keys(since, now)
    buckets = {k: {"month": k, "created": 0, "completed": 0} for k in keys}

    rows = db.query(Task.created_at, Task.status).filter(Task.created_at >= since).all()
    for created_at, status in rows:
        bucket = buckets.get(created_at.strftime("%Y-%m"))
        if bucket is None:
            continue
        bucket["created"] += 1
        if status == "completed":
            bucket["completed"] += 1
    return [buckets[k] for k in keys]


def analytics_data(db: Session, range_days: int = DEFAULT_RANGE_DAYS) -> dict:
    expire_overdue_offers(db)
    since = utcnow() - timedelta(days=range_days)
    overview = {
        "total_contractors": _count(db, Contractor),
        "active_tasks": _count(db, Task, Task.status == "pending"),
        "completed_tasks": _count(db, Task, Task.status == "completed"),
        "open_tickets": _count(db, SupportTicket, SupportTicket.status == "open"),
        "resolved_tickets": _count(db, SupportTicket, SupportTicket.status == "resolved"),
        "total_offers": _count(db, Offer),
        "accepted_offers": _count(db, Offer, Offer.status == "accepted"),
        "total_emails": _count(db, Email),
        "new_in_range": {
            "tasks": _count(db, Task, Task.created_at >= since),
            "offers": _count(db, Offer, Offer.created_at >= since),
            "tickets": _count(db, SupportTicket, SupportTicket.created_at >= since),
            "emails": _count(db, Email, Email.created_at >= since),
        },
    }
    return {
        "range_days": range_days,
        "overview": overview,
        "charts": {
            "tasks_over_time": tasks_over_time(db, range_days),
            "tickets_by_status": _by_status(db, SupportTicket, TICKET_STATUSES),
            "offers_by_status": _by_status(db, Offer, OFFER_STATUSES),
            "contractors_by_status": _by_status(db, Contractor, CONTRACTOR_STATUSES),
        },
    }
