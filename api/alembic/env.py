"""Alembic environment for the branch office schema.

Migrations run over a synchronous driver derived from DATABASE_URL
(asyncpg -> psycopg2, aiosqlite -> pysqlite). On PostgreSQL a session-level
advisory lock serialises replicas that start at the same time.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import Connection, create_engine, make_url, text

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import models  # noqa: F401,E402
from alembic import context  # noqa: E402
from core.config import get_settings  # noqa: E402
from core.database import Base  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata

MIGRATION_LOCK_KEY = 582047113
LOCK_WAIT_SECONDS = 120
LOCK_POLL_SECONDS = 2

# async driver -> sync driver; None means the dialect default
_SYNC_DRIVER = {"asyncpg": "psycopg2", "aiosqlite": None}


def sync_database_url() -> str:
    url = make_url(get_settings().database_url)
    backend, _, driver = url.drivername.partition("+")
    if driver in _SYNC_DRIVER:
        sync_driver = _SYNC_DRIVER[driver]
        url = url.set(drivername=f"{backend}+{sync_driver}" if sync_driver else backend)
    return url.render_as_string(hide_password=False)


@contextmanager
def migration_lock(connection: Connection) -> Iterator[None]:
    """Hold pg_advisory_lock(MIGRATION_LOCK_KEY) for the block; no-op elsewhere."""
    if connection.dialect.name != "postgresql":
        yield
        return

    deadline = time.monotonic() + LOCK_WAIT_SECONDS
    params = {"key": MIGRATION_LOCK_KEY}
    while not connection.execute(
        text("SELECT pg_try_advisory_lock(:key)"), params
    ).scalar():
        if time.monotonic() >= deadline:
            raise RuntimeError(
                f"Migration lock not acquired within {LOCK_WAIT_SECONDS}s; "
                "another replica may be stuck holding it."
            )
        logger.debug("migration lock busy, retrying")
        time.sleep(LOCK_POLL_SECONDS)

    # end the implicit transaction so Alembic opens its own
    connection.commit()
    logger.info("migration lock acquired")
    try:
        yield
    finally:
        try:
            connection.execute(text("SELECT pg_advisory_unlock(:key)"), params)
            logger.info("migration lock released")
        except Exception:
            # the server drops session locks on disconnect
            logger.warning("migration lock release failed", exc_info=True)


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of executing it."""
    context.configure(
        url=sync_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(sync_database_url())
    try:
        with engine.connect() as connection, migration_lock(connection):
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                # SQLite needs table rebuilds for ALTER
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
