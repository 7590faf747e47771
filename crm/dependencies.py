"""
dependencies.py — Session authentication for the routers

The login endpoint stores only the user id in the signed session cookie;
every request reloads the User row here, so deactivation and deletion take
effect immediately.

Business Rules:
- get_user: None when there is no session or the account no longer exists
  (a dangling session is cleared)
- require_user: 401 without a session, 403 for a deactivated account
- require_admin: require_user plus role "admin", else 403

Called by: all routers
Depends on: models, database
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .database import get_db
from .models import User

log = logging.getLogger(__name__)


def get_user(request: Request, db: Session) -> User | None:
    uid = request.session.get("user_id")
    if not uid:
        return None
    user = db.get(User, uid)
    if user is None:
        log.info("Session refers to deleted user %s; clearing it", uid)
        request.session.clear()
    return user


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """The logged-in, active user of this request."""
    user = get_user(request, db)
    if user is None:
        raise HTTPException(401, "Not authenticated")
    if not user.is_active:
        request.session.clear()
        raise HTTPException(403, "Account deactivated, contact an administrator")
    return user


def is_admin(user: User) -> bool:
    return user.role == "admin"


def require_admin(user: User = Depends(require_user)) -> User:
    if not is_admin(user):
        raise HTTPException(403, "Admin access required")
    return user
