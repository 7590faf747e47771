"""
routers/emails.py — Email correspondence of the current user

Business Rules:
- Records are scoped to their owner; other users' emails are 404
- POST with status "sent" delivers through SMTP after the record is stored:
  not configured → 201 with the record left in draft; delivery failure →
  502 with the record marked failed (see services/email_service.py)
- POST /{id}/send sends a draft or retries a failed email
- mark-read / mark-unread toggle the read state of received mail

Called by: main.py (router mount)
Depends on: services/email_service.py, services/mailer.py
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..schemas.emails import EmailCreate
from ..schemas.responses import OkResponse
from ..services import email_service
from ..services.mailer import SmtpMailer, get_mailer

router = APIRouter(tags=["emails"])


@router.get("/api/emails")
async def list_emails(
    type: str | None = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    return [email_service.email_to_dict(e) for e in email_service.list_for_user(db, user.id, type)]


@router.get("/api/emails/{email_id}")
async def get_email(email_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return email_service.email_to_dict(email_service.get_for_user(db, email_id, user.id))


@router.post("/api/emails", status_code=201)
def create_email(
    payload: EmailCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    mailer: SmtpMailer = Depends(get_mailer),
):
    email, delivery = email_service.create_email(db, user.id, payload.model_dump(), mailer)
    return email_service.email_to_dict(email, delivery)


@router.post("/api/emails/{email_id}/send")
def send_email(
    email_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    mailer: SmtpMailer = Depends(get_mailer),
):
    email = email_service.get_for_user(db, email_id, user.id)
    email, delivery = email_service.send_email(db, email, mailer)
    return email_service.email_to_dict(email, delivery)


@router.patch("/api/emails/{email_id}/mark-read")
async def mark_read(email_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return email_service.email_to_dict(email_service.mark_read(db, email_id, user.id))


@router.patch("/api/emails/{email_id}/mark-unread")
async def mark_unread(email_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return email_service.email_to_dict(email_service.mark_unread(db, email_id, user.id))


@router.delete("/api/emails/{email_id}", response_model=OkResponse)
async def delete_email(email_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    email_service.delete_email(db, email_id, user.id)
    return {"ok": True}
