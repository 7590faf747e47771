"""
routers/users.py — User administration (admin only)

Business Rules:
- Passwords are bcrypt-hashed here; responses never include the hash
- Usernames are unique (409 on conflict)
- An admin cannot delete or deactivate their own account, nor demote
  themselves
- Deleting a user keeps their tasks, emails and notifications with
  user_id cleared

Called by: main.py (router mount)
Depends on: services/auth_service.py, dependencies
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin
from ..models import User
from ..schemas.auth import UserCreate, UserUpdate
from ..schemas.responses import OkResponse
from ..services.auth_service import hash_password
from ..services.errors import ValidationError
from ..services.store import EntityStore
from .auth import user_to_dict

router = APIRouter(tags=["users"])


def _check_username_free(db: Session, username: str, exclude_id: str | None = None) -> None:
    q = db.query(User).filter(User.username == username)
    if exclude_id:
        q = q.filter(User.id != exclude_id)
    if q.first():
        raise HTTPException(409, f"Username '{username}' is already taken")


@router.get("/api/users")
async def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    rows = EntityStore(db).list(User, order_by=User.username)
    return [user_to_dict(u) for u in rows]


@router.post("/api/users", status_code=201)
async def create_user(payload: UserCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    _check_username_free(db, payload.username)
    data = payload.model_dump()
    data["password_hash"] = hash_password(data.pop("password"))
    u = EntityStore(db).create(User, data)
    logger.info("User '{}' created by {}", u.username, admin.username)
    return user_to_dict(u)


@router.put("/api/users/{user_id}")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    store = EntityStore(db)
    u = store.get(User, user_id)
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}

    if u.id == admin.id and (changes.get("is_active") is False or changes.get("role", "admin") != "admin"):
        raise ValidationError("You cannot deactivate or demote your own account", {"user_id": "self"})
    if "username" in changes:
        _check_username_free(db, changes["username"], exclude_id=u.id)
    if "password" in changes:
        changes["password_hash"] = hash_password(changes.pop("password"))

    u = store.update(u, changes)
    return user_to_dict(u)


@router.delete("/api/users/{user_id}", response_model=OkResponse)
async def delete_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    if user_id == admin.id:
        raise ValidationError("You cannot delete your own account", {"user_id": "self"})
    EntityStore(db).delete(User, user_id)
    logger.info("User {} deleted by {}", user_id, admin.username)
    return {"ok": True}
