"""
env.py — Alembic environment for the CRM schema

The database URL always comes from crm.config (DATABASE_URL), never from
alembic.ini. Importing crm.models registers every table on Base.metadata
for autogenerate.

Business Rules:
- One transaction per migration run
- SQLite gets batch mode (copy-and-move) since it cannot ALTER most columns
- Column type changes are compared during autogenerate

Called by: alembic CLI
Depends on: crm.models (Base + all tables), crm.config (settings)
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from crm.config import settings
from crm.models import Base  # noqa: F401 — registers all tables

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

COMMON_OPTIONS = {
    "target_metadata": target_metadata,
    "render_as_batch": settings.database_url.startswith("sqlite"),
    "compare_type": True,
}


def run_offline() -> None:
    """Emit SQL to stdout instead of executing it (alembic upgrade --sql)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMMON_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **COMMON_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
