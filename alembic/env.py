# alembic/env.py
# Alembic migration environment
#
# Key responsibilities:
#   1. Read DATABASE_URL from the environment / .env
#   2. Import all models via tuitionhub/db/base.py so Alembic detects schema changes
#   3. Support both offline (SQL script) and online (live connection) modes

import os
import sys
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

# ── Make tuitionhub importable from alembic/ directory ────────────────────────
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# ── Load .env for local development ──────────────────────────────────────────
load_dotenv()

# ── Alembic Config ────────────────────────────────────────────────────────────
config = context.config

# Set up Python logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# ── Import all models so Alembic can detect them ─────────────────────────────
import tuitionhub.db.base  # noqa: F401,E402 -- registers all models as side effect
from tuitionhub.db.base_class import Base  # noqa: E402

target_metadata = Base.metadata


def get_url() -> str:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError(
            "DATABASE_URL not set. Run: cp .env.example .env and fill in credentials."
        )
    return database_url


# ── Offline Mode ──────────────────────────────────────────────────────────────
# Generates SQL migration script without connecting to DB
# Usage: alembic upgrade head --sql > migration.sql
def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,          # Detect column type changes
    )
    with context.begin_transaction():
        context.run_migrations()


# ── Online Mode ───────────────────────────────────────────────────────────────
# Usage: alembic upgrade head
def run_migrations_online() -> None:
    # alembic.ini leaves sqlalchemy.url blank
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,    # No connection pooling for migrations
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


# ── Entry Point ───────────────────────────────────────────────────────────────
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
