"""Alembic environment script for async database migrations.

The database URL comes from the application settings rather than
alembic.ini, so migrations always target the same database as the app.
"""

import asyncio
import logging
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from src.core.config import get_settings
from src.domain.users.models import User
from src.infrastructure.database.base import Base

config = context.config

logger = logging.getLogger(__name__)

# Models must be imported for autogenerate to see their tables
MODELS = (User,)
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output."""
    logger.info("Running migrations in offline mode")

    context.configure(
        url=get_settings().database_config.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations using the provided connection.

    Args:
        connection: The database connection to use for migrations.
    """
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode with an async engine."""
    logger.info("Running migrations in online mode with async engine")

    db_config = get_settings().database_config
    configuration: dict[str, Any] = {
        "sqlalchemy.url": db_config.database_url,
        "sqlalchemy.echo": db_config.echo,
    }

    # NullPool: one short-lived connection, no pool options
    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
