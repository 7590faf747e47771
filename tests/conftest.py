"""
conftest.py — Shared Test Fixtures for the CRM

Provides an in-memory SQLite database, a FastAPI TestClient with auth and
mailer overrides, and factory fixtures for the core models.

Business Rules:
- All tests run against an isolated in-memory DB
- Auth is overridden so tests don't need a session cookie or CAPTCHA
- The SMTP mailer is replaced by a MagicMock; nothing leaves the process
- Each test function gets fresh tables

Called by: all test files via pytest autodiscovery
Depends on: crm.models (Base), crm.database (get_db), crm.dependencies
"""

import os

os.environ["TESTING"] = "1"  # Must be set before importing crm modules
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RECAPTCHA_ENABLED", "false")

from datetime import date
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from crm.models import Base, Contractor, Offer, SupportTicket, Task, User
from crm.services.auth_service import hash_password
from crm.services.mailer import DeliveryResult, SmtpMailer

# ── In-memory SQLite engine ──────────────────────────────────────────

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """Enforce FK constraints (off by default in SQLite)."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# bcrypt is slow on purpose; hash the shared fixture password once
TEST_PASSWORD = "correct-horse-battery"
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def test_password() -> str:
    """Plaintext password of every fixture user."""
    return TEST_PASSWORD


def _make_user(db: Session, username: str, role: str = "user", **kw) -> User:
    user = User(
        username=username,
        password_hash=_TEST_PASSWORD_HASH,
        email=f"{username}@example.com",
        role=role,
        **kw,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """A standard user."""
    return _make_user(db_session, "anna")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """A second user, for ownership checks."""
    return _make_user(db_session, "bartek")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """An admin-role user for privileged operations."""
    return _make_user(db_session, "admin", role="admin")


@pytest.fixture()
def test_contractor(db_session: Session) -> Contractor:
    c = Contractor(
        name="Kowalski Budownictwo",
        email="biuro@kowalski.pl",
        phone="+48 600 100 200",
        nip="1234563218",
        city="Kraków",
    )
    db_session.add(c)
    db_session.commit()
    db_session.refresh(c)
    return c


@pytest.fixture()
def test_offer(db_session: Session, test_contractor: Contractor) -> Offer:
    """A draft offer: 10000 net, 10% discount, 23% VAT → 11070 gross."""
    o = Offer(
        contractor_id=test_contractor.id,
        contractor_name=test_contractor.name,
        title="Remont biura",
        description="Malowanie i wymiana podłóg",
        amount=10000,
        discount_percent=10,
        vat_rate=23,
        final_amount=11070,
        valid_until=date(2099, 12, 31),
    )
    db_session.add(o)
    db_session.commit()
    db_session.refresh(o)
    return o


@pytest.fixture()
def test_task(db_session: Session, test_user: User) -> Task:
    t = Task(title="Call Kowalski", date="2026-10-20", time="09:30", user_id=test_user.id)
    db_session.add(t)
    db_session.commit()
    db_session.refresh(t)
    return t


@pytest.fixture()
def test_ticket(db_session: Session) -> SupportTicket:
    t = SupportTicket(user="Jan Nowak", email="jan@nowak.pl", issue="Cannot export invoices")
    db_session.add(t)
    db_session.commit()
    db_session.refresh(t)
    return t


@pytest.fixture()
def mock_mailer() -> MagicMock:
    """A configured mailer whose send() succeeds."""
    m = MagicMock(spec=SmtpMailer)
    m.is_configured.return_value = True
    m.send.return_value = DeliveryResult(True, message_id="<test@crm>")
    m.test_connection.return_value = DeliveryResult(True)
    m.status.return_value = {"configured": True, "host": "smtp.test", "port": 587, "secure": False, "user": "crm"}
    return m


def _client_for(db_session: Session, user: User, mailer) -> TestClient:
    from crm.database import get_db
    from crm.dependencies import require_user
    from crm.main import app
    from crm.services.mailer import get_mailer

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[require_user] = lambda: user
    app.dependency_overrides[get_mailer] = lambda: mailer
    return TestClient(app)


@pytest.fixture()
def client(db_session: Session, test_user: User, mock_mailer: MagicMock) -> TestClient:
    """FastAPI TestClient with auth overridden to return test_user."""
    from crm.main import app

    with _client_for(db_session, test_user, mock_mailer) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_client(db_session: Session, admin_user: User, mock_mailer: MagicMock) -> TestClient:
    """TestClient authenticated as admin_user."""
    from crm.main import app

    with _client_for(db_session, admin_user, mock_mailer) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def anon_client(db_session: Session) -> TestClient:
    """TestClient with only the DB overridden — real session auth applies."""
    from crm.database import get_db
    from crm.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
