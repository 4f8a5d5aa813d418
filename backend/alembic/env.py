"""
Alembic Migration Environment
===============================

What:  Applies the versions/ scripts to the blog store through an async engine.
How:   The target URL is the first of:
           1. config.attributes["database_url"]  (alembic.command callers, tests)
           2. `alembic -x database_url=...`
           3. DATABASE_URL, through blog_api.config.settings
       alembic.ini only supplies the script location and logging.
Who:   `alembic upgrade head` from backend/, and tests/test_migrations.py.

SQLite runs in batch mode: it cannot ALTER most column properties, so
later revisions get a table rebuild instead.
"""

import asyncio
import logging
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from blog_api.config import settings
from blog_api.database import Base

# Registers BlogPost on Base.metadata for --autogenerate
from blog_api.models.blog import BlogPost  # noqa: F401

config = context.config

if config.config_file_name is not None:
    # blog_api loggers stay enabled when migrations run in-process
    fileConfig(config.config_file_name, disable_existing_loggers=False)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def database_url() -> str:
    url = config.attributes.get("database_url")
    if not url:
        url = context.get_x_argument(as_dictionary=True).get("database_url")
    return url or settings.database_url


def run_migrations_offline(url: str) -> None:
    """Write the migration SQL to stdout instead of executing it."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_server_default=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await engine.dispose()


def run_migrations_online(url: str) -> None:
    logger.info("Migrating %s", make_url(url).render_as_string(hide_password=True))
    asyncio.run(run_async_migrations(url))


if context.is_offline_mode():
    run_migrations_offline(database_url())
else:
    run_migrations_online(database_url())
