"""Shared fixtures for schema_probe tests.

:class:`FakeConnection` stands in for an ``AsyncConnection`` in unit
tests.  It records every statement, tracks transaction state the way
``AsyncConnection.begin()`` does, and can be told to fail an INSERT with
a given SQLAlchemy error, or fail the TRUNCATE that cleans up after it.
"""

from __future__ import annotations

from typing import Any

import pytest

from schema_probe.models.schema_definition import USERS_SCHEMA, SchemaDefinition


def catalog_rows(definition: SchemaDefinition = USERS_SCHEMA) -> list[dict[str, Any]]:
    """information_schema rows for a table that matches *definition* exactly."""
    rows: list[dict[str, Any]] = []
    for spec in definition.fields():
        rows.append(
            {
                "column_name": spec.name,
                "data_type": spec.type,
                "is_nullable": "YES" if spec.nullable in (None, True) else "NO",
                "column_default": "now()" if spec.has_default else None,
                "character_maximum_length": spec.max_length,
            }
        )
    return rows


class _FakeMappings:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows

    def first(self) -> dict[str, Any] | None:
        return self._rows[0] if self._rows else None

    def all(self) -> list[dict[str, Any]]:
        return list(self._rows)


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]] | None = None, rowcount: int = 0) -> None:
        self._rows = rows or []
        self.rowcount = rowcount

    def mappings(self) -> _FakeMappings:
        return _FakeMappings(self._rows)


class _FakeTransaction:
    def __init__(self, conn: FakeConnection) -> None:
        self._conn = conn

    async def __aenter__(self) -> _FakeTransaction:
        self._conn._in_tx = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self._conn._in_tx = False
        if exc_type is not None:
            self._conn.rollbacks += 1
        else:
            self._conn.commits += 1
        return False


class FakeConnection:
    """In-memory stand-in for an ``AsyncConnection``."""

    def __init__(
        self,
        *,
        catalog: list[dict[str, Any]] | None = None,
        readback_row: dict[str, Any] | None = None,
        insert_error: Exception | None = None,
        catalog_error: Exception | None = None,
        truncate_error: Exception | None = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else []
        self.readback_row = readback_row
        self.insert_error = insert_error
        self.catalog_error = catalog_error
        self.truncate_error = truncate_error
        self.statements: list[tuple[str, dict[str, Any] | None]] = []
        self.commits = 0
        self.rollbacks = 0
        self._in_tx = False

    def begin(self) -> _FakeTransaction:
        return _FakeTransaction(self)

    def in_transaction(self) -> bool:
        return self._in_tx

    async def commit(self) -> None:
        self._in_tx = False
        self.commits += 1

    async def rollback(self) -> None:
        self._in_tx = False
        self.rollbacks += 1

    async def execute(self, statement: Any, params: dict[str, Any] | None = None) -> FakeResult:
        sql = str(statement).strip()
        self.statements.append((sql, params))

        if "information_schema.columns" in sql:
            if self.catalog_error is not None:
                raise self.catalog_error
            self._in_tx = True
            return FakeResult(rows=self.catalog)
        if sql.startswith("INSERT"):
            if self.insert_error is not None:
                raise self.insert_error
            return FakeResult(rowcount=1)
        if sql.startswith("SELECT"):
            return FakeResult(rows=[self.readback_row] if self.readback_row is not None else [])
        if sql.startswith("TRUNCATE") and self.truncate_error is not None:
            raise self.truncate_error
        return FakeResult()

    @property
    def truncates(self) -> int:
        return sum(1 for sql, _ in self.statements if sql.startswith("TRUNCATE"))


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection(catalog=catalog_rows())


@pytest.fixture
def make_catalog():
    """Factory for catalog rows matching a definition."""
    return catalog_rows


@pytest.fixture
def make_conn():
    """Factory for :class:`FakeConnection` instances."""
    return FakeConnection
