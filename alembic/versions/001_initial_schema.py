"""initial schema — users, contractors, tasks, offers, emails, tickets, notifications

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

For databases created by startup.py's create_all: run `alembic stamp 001_initial`.
For NEW databases: run `alembic upgrade head`.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime())


def _user_fk() -> sa.Column:
    return sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL"))


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(150), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
    )

    op.create_table(
        "contractors",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(100), nullable=False),
        sa.Column("nip", sa.String(20)),
        sa.Column("regon", sa.String(20)),
        sa.Column("krs", sa.String(20)),
        sa.Column("account_number", sa.String(64)),
        sa.Column("province", sa.String(100)),
        sa.Column("address", sa.Text()),
        sa.Column("city", sa.String(255)),
        sa.Column("postal_code", sa.String(20)),
        sa.Column("country", sa.String(100), server_default="Polska"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
    )
    op.create_index("ix_contractors_name", "contractors", ["name"])
    op.create_index("ix_contractors_status", "contractors", ["status"])

    op.create_table(
        "tasks",
        _id(),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("completed_at", sa.DateTime()),
        _user_fk(),
        _created_at(),
    )
    op.create_index("ix_tasks_user_created", "tasks", ["user_id", "created_at"])

    op.create_table(
        "offers",
        _id(),
        sa.Column("contractor_id", sa.String(36), sa.ForeignKey("contractors.id", ondelete="SET NULL")),
        sa.Column("contractor_name", sa.String(255), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("vat_rate", sa.Integer(), nullable=False, server_default="23"),
        sa.Column("discount_percent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("final_amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False, server_default="PLN"),
        sa.Column("valid_until", sa.Date()),
        sa.Column("payment_terms", sa.String(100), server_default="14 dni"),
        sa.Column("category", sa.String(100), server_default="Standardowa"),
        sa.Column("notes", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("sent_at", sa.DateTime()),
        sa.Column("decided_at", sa.DateTime()),
        _created_at(),
    )
    op.create_index("ix_offers_status", "offers", ["status"])
    op.create_index("ix_offers_contractor", "offers", ["contractor_id"])

    op.create_table(
        "emails",
        _id(),
        sa.Column("to", sa.String(500), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("content", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("direction", sa.String(20), nullable=False, server_default="sent"),
        sa.Column("from_address", sa.String(500)),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime()),
        sa.Column("sent_at", sa.DateTime()),
        sa.Column("error", sa.Text()),
        _user_fk(),
        _created_at(),
    )
    op.create_index("ix_emails_user_created", "emails", ["user_id", "created_at"])

    op.create_table(
        "support_tickets",
        _id(),
        sa.Column("user", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("issue", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("resolved_at", sa.DateTime()),
        _created_at(),
    )
    op.create_index("ix_support_tickets_status_created", "support_tickets", ["status", "created_at"])

    op.create_table(
        "notifications",
        _id(),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="info"),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime()),
        _user_fk(),
        _created_at(),
    )
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "read", "created_at"])


def downgrade() -> None:
    """Drop all tables. Destructive — dev/test only."""
    for table in ("notifications", "support_tickets", "emails", "offers", "tasks", "contractors", "users"):
        op.drop_table(table)
