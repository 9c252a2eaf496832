"""Alembic environment for the ``users`` table revisions.

The URL comes from ``alembic -x url=...``, then ``ALEMBIC_DATABASE_URL``,
then ``DATABASE_URL``, then ``sqlalchemy.url`` in ``alembic.ini``.
Whatever the source, it is switched to the psycopg3 synchronous driver.

The probed table usually lives in an application database that holds many
other tables, so autogenerate only ever looks at tables declared on
``Base.metadata``; everything else in the database is left alone.
"""

from __future__ import annotations

import logging
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from schema_probe.state.tables import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata

_SYNC_PREFIX = "postgresql+psycopg://"
_PG_PREFIXES = ("postgresql+asyncpg://", "postgresql://", "postgres://")


def _resolve_url() -> str:
    url = (
        context.get_x_argument(as_dictionary=True).get("url")
        or os.environ.get("ALEMBIC_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or config.get_main_option("sqlalchemy.url")
    )
    if not url:
        raise RuntimeError(
            "No database URL: pass -x url=..., or set ALEMBIC_DATABASE_URL or DATABASE_URL."
        )

    for prefix in _PG_PREFIXES:
        if url.startswith(prefix):
            url = _SYNC_PREFIX + url[len(prefix) :]
            break
    # asyncpg spells it ssl=, libpq spells it sslmode=.
    return url.replace("ssl=require", "sslmode=require")


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    if type_ == "table" and reflected and compare_to is None:
        return name in target_metadata.tables
    return True


def _configure_kwargs() -> dict[str, object]:
    return {
        "target_metadata": target_metadata,
        "include_object": _include_object,
        "compare_type": True,
        "compare_server_default": True,
    }


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without connecting."""
    context.configure(
        url=_resolve_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply revisions over a short-lived synchronous connection."""
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _resolve_url()
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    logger.info("Running migrations against %s", engine.url.render_as_string(hide_password=True))
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **_configure_kwargs())
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
