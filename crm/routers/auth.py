"""
routers/auth.py — Authentication & Session Routes

Username/password login gated by a CAPTCHA check, logout, session status.

Business Rules:
- Login requires a valid CAPTCHA token (unless RECAPTCHA_ENABLED=false)
- Every failed login gets the same 401 message; the reason is only logged
- The session cookie carries the user id only
- Login is rate limited per client IP (RATE_LIMIT_LOGIN)

Called by: main.py (router mount)
Depends on: services/auth_service.py, dependencies, rate_limit
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..rate_limit import limiter
from ..schemas.auth import LoginRequest
from ..schemas.responses import OkResponse
from ..services.auth_service import authenticate

router = APIRouter(tags=["auth"])


def user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "role": u.role,
        "is_active": bool(u.is_active),
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


@router.post("/api/auth/login")
@limiter.limit(settings.rate_limit_login)
async def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    remote_ip = request.client.host if request.client else None
    user = await authenticate(db, payload.username, payload.password, payload.recaptcha_token, remote_ip)
    request.session.clear()
    request.session["user_id"] = user.id
    return {"ok": True, "user": user_to_dict(user)}


@router.post("/api/auth/logout", response_model=OkResponse)
async def logout(request: Request):
    request.session.clear()
    return {"ok": True}


@router.get("/api/auth/me")
async def me(user: User = Depends(require_user)):
    return user_to_dict(user)
