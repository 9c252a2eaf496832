"""Live-database fixtures for the integration suite.

Tests here run only when ``DATABASE_URL`` (or ``SCHEMA_PROBE_DATABASE_URL``)
is set.  The ``users`` table is created from the ORM metadata when it does
not exist yet; it is never dropped.  Constraint scenarios TRUNCATE it, so
point these tests at a disposable database.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy import text

from schema_probe.config import load_settings
from schema_probe.introspection.schema_introspector import ActualSchema, SchemaIntrospector
from schema_probe.state.database import connection_scope
from schema_probe.state.tables import Base


@pytest.fixture(scope="session")
def settings():
    return load_settings()


async def _ensure_users_table(conn) -> None:
    async with conn.begin():
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)


@pytest_asyncio.fixture
async def db_conn(settings):
    """One connection per test, with the table guaranteed to exist."""
    async with connection_scope(
        settings.database_url,
        statement_timeout_ms=settings.statement_timeout_ms,
    ) as conn:
        await _ensure_users_table(conn)
        yield conn


@pytest_asyncio.fixture(scope="module", loop_scope="module")
async def users_snapshot(settings) -> ActualSchema:
    """Catalog snapshot of ``users``, read once for the whole module."""
    async with connection_scope(
        settings.database_url,
        statement_timeout_ms=settings.statement_timeout_ms,
    ) as conn:
        await _ensure_users_table(conn)
        actual = await SchemaIntrospector(conn).introspect("users", settings.table_schema)
        await conn.rollback()
    return actual


@pytest_asyncio.fixture
async def scratch_schema(db_conn):
    """An empty schema next to ``public``, dropped again after the test."""
    name = "users_scratch"
    async with db_conn.begin():
        await db_conn.execute(text(f"DROP SCHEMA IF EXISTS {name} CASCADE"))
        await db_conn.execute(text(f"CREATE SCHEMA {name}"))
    yield name
    if db_conn.in_transaction():
        await db_conn.rollback()
    async with db_conn.begin():
        await db_conn.execute(text(f"DROP SCHEMA IF EXISTS {name} CASCADE"))
