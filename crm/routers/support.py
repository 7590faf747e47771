"""
routers/support.py — Support tickets

Business Rules:
- New tickets start open and notify the creating user
- open → in_progress → resolved, open → resolved; resolved is terminal
- Resolving a ticket notifies the user who resolved it
- PUT may carry the current status unchanged; a different status goes
  through the same guard as POST /status

Called by: main.py (router mount)
Depends on: services/workflow.py, services/notifications.py, schemas/support.py
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import SupportTicket, User
from ..schemas.responses import OkResponse
from ..schemas.support import TicketCreate, TicketStatusChange, TicketUpdate
from ..services.notifications import notify
from ..services.store import EntityStore
from ..services.workflow import apply_ticket_transition

router = APIRouter(tags=["support"])


def ticket_to_dict(t: SupportTicket) -> dict:
    return {
        "id": t.id,
        "user": t.user,
        "email": t.email,
        "issue": t.issue,
        "priority": t.priority,
        "status": t.status,
        "resolved_at": t.resolved_at.isoformat() if t.resolved_at else None,
        "created_at": t.created_at.isoformat() if t.created_at else None,
    }


def _transition(db: Session, ticket: SupportTicket, target: str, user: User) -> SupportTicket:
    apply_ticket_transition(ticket, target)
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket {} → {} by {}", ticket.id, target, user.username)
    if target == "resolved":
        notify(db, user.id, f"Support ticket from {ticket.user} resolved", "success")
    return ticket


@router.get("/api/support-tickets")
async def list_tickets(
    status: str | None = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    criteria = [SupportTicket.status == status] if status else []
    rows = EntityStore(db).list(
        SupportTicket, *criteria, order_by=(SupportTicket.created_at.desc(), SupportTicket.id)
    )
    return [ticket_to_dict(t) for t in rows]


@router.get("/api/support-tickets/{ticket_id}")
async def get_ticket(ticket_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return ticket_to_dict(EntityStore(db).get(SupportTicket, ticket_id))


@router.post("/api/support-tickets", status_code=201)
async def create_ticket(payload: TicketCreate, user: User = Depends(require_user), db: Session = Depends(get_db)):
    ticket = EntityStore(db).create(SupportTicket, {**payload.model_dump(), "status": "open"})
    notify(db, user.id, f"New support ticket from {ticket.user}", "info")
    return ticket_to_dict(ticket)


@router.put("/api/support-tickets/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    payload: TicketUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    store = EntityStore(db)
    ticket = store.get(SupportTicket, ticket_id)
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k == "email"
    }
    target = changes.pop("status", None)
    store.update(ticket, changes, commit=target is None or target == ticket.status)
    if target is not None and target != ticket.status:
        ticket = _transition(db, ticket, target, user)
    return ticket_to_dict(ticket)


@router.post("/api/support-tickets/{ticket_id}/status")
async def change_status(
    ticket_id: str,
    payload: TicketStatusChange,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    ticket = EntityStore(db).get(SupportTicket, ticket_id)
    return ticket_to_dict(_transition(db, ticket, payload.status, user))


@router.delete("/api/support-tickets/{ticket_id}", response_model=OkResponse)
async def delete_ticket(ticket_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    EntityStore(db).delete(SupportTicket, ticket_id)
    return {"ok": True}
