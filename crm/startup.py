"""
startup.py — Database bootstrap (idempotent)

Tables and indexes are defined in the ORM models and created with
Base.metadata.create_all(checkfirst=True); Alembic owns later schema
changes. This file also seeds the first admin account.

Business Rules:
- Skipped entirely under TESTING (tests build their own schema)
- The admin account is only seeded when the users table is empty and
  ADMIN_PASSWORD is set; it is never overwritten afterwards

Called by: main.py lifespan
Depends on: database.py (engine, SessionLocal), models, services/auth_service.py
"""

import logging

from .config import settings
from .database import SessionLocal, engine

log = logging.getLogger(__name__)


def run_startup_tasks() -> None:
    """Execute all idempotent startup operations. Safe to call on every app boot."""
    if settings.testing:
        log.info("TESTING mode — skipping startup tasks")
        return

    from .models import Base

    Base.metadata.create_all(bind=engine, checkfirst=True)
    log.info("ORM schema sync complete (create_all checkfirst=True)")
    _seed_admin()


def _seed_admin() -> None:
    from .models import User
    from .services.auth_service import hash_password

    db = SessionLocal()
    try:
        if db.query(User).count():
            return
        if not settings.admin_password:
            log.warning("No users exist and ADMIN_PASSWORD is not set — nobody can log in")
            return
        db.add(User(
            username=settings.admin_username,
            password_hash=hash_password(settings.admin_password),
            email=settings.admin_email,
            role="admin",
        ))
        db.commit()
        log.info("Seeded admin user '%s'", settings.admin_username)
    finally:
        db.close()
