"""Async SQLAlchemy engine and the session-scoped connection.

A probe session holds exactly one connection: it is acquired when the
session starts and released when it ends, on every exit path.  The
connection is passed explicitly to the introspector and the constraint
probe rather than kept in module state.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from schema_probe.config import normalize_database_url

logger = logging.getLogger(__name__)


def get_engine(
    database_url: str,
    *,
    statement_timeout_ms: int = 30000,
    echo: bool = False,
) -> AsyncEngine:
    """Create an async SQLAlchemy engine for a single probe session.

    ``NullPool`` is used because a session only ever opens one connection
    and closes it when done; there is nothing to pool.

    Parameters
    ----------
    database_url:
        Connection string.  Plain ``postgresql://`` URLs are switched to the
        asyncpg driver.
    statement_timeout_ms:
        Server-side ``statement_timeout`` applied to the connection.
    echo:
        Log every emitted statement through SQLAlchemy's engine logger.

    Returns
    -------
    AsyncEngine
        A configured async engine.
    """
    url = normalize_database_url(database_url)
    connect_args: dict[str, object] = {}
    if url.startswith("postgresql+asyncpg://"):
        connect_args["server_settings"] = {"statement_timeout": str(statement_timeout_ms)}

    engine = create_async_engine(
        url,
        poolclass=NullPool,
        echo=echo,
        connect_args=connect_args,
    )
    logger.debug("Created async engine for %s", engine.url.render_as_string(hide_password=True))
    return engine


@asynccontextmanager
async def connection_scope(
    database_url: str,
    *,
    statement_timeout_ms: int = 30000,
    echo: bool = False,
) -> AsyncGenerator[AsyncConnection, None]:
    """Yield one connection for the whole probe session.

    The connection is closed and the engine disposed when the block exits,
    whether it exits normally or with an exception.
    """
    engine = get_engine(database_url, statement_timeout_ms=statement_timeout_ms, echo=echo)
    try:
        async with engine.connect() as conn:
            logger.info("Opened probe session on %s", engine.url.render_as_string(hide_password=True))
            yield conn
    finally:
        await engine.dispose()
        logger.info("Closed probe session")
