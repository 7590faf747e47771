"""
routers/notifications.py — In-app notifications of the current user

Called by: main.py (router mount)
Depends on: services/notifications.py
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import Notification, User
from ..schemas.responses import CountResponse
from ..schemas.support import NotificationCreate
from ..services import notifications as notification_service

router = APIRouter(tags=["notifications"])


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "message": n.message,
        "type": n.type,
        "read": bool(n.read),
        "read_at": n.read_at.isoformat() if n.read_at else None,
        "user_id": n.user_id,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


@router.get("/api/notifications")
async def list_notifications(
    unread: bool = False,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    rows = notification_service.list_for_user(db, user.id, unread_only=unread)
    return [notification_to_dict(n) for n in rows]


@router.get("/api/notifications/unread-count", response_model=CountResponse)
async def unread_count(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"count": notification_service.unread_count(db, user.id)}


@router.post("/api/notifications", status_code=201)
async def create_notification(
    payload: NotificationCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    n = notification_service.create_notification(db, user.id, payload.message, payload.type)
    return notification_to_dict(n)


@router.patch("/api/notifications/mark-all-read", response_model=CountResponse)
async def mark_all_read(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"count": notification_service.mark_all_read(db, user.id)}


@router.patch("/api/notifications/{notification_id}/read")
async def mark_read(notification_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return notification_to_dict(notification_service.mark_read(db, notification_id, user.id))
