"""Live schema introspection from the PostgreSQL catalog.

Queries ``information_schema.columns`` once per session and builds an
:class:`ActualSchema` snapshot.  Every conformance comparison in the
session reads from that snapshot, so all fields are judged against the
same state of the catalog.

Type strings are kept exactly as the catalog reports them; no aliasing or
case folding is applied.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

logger = logging.getLogger(__name__)

_COLUMNS_QUERY = text(
    """
    SELECT column_name,
           data_type,
           is_nullable,
           column_default,
           character_maximum_length
      FROM information_schema.columns
     WHERE table_name = :table_name
       AND table_schema = :table_schema
     ORDER BY ordinal_position
    """
)


class IntrospectionError(Exception):
    """Raised when the live schema for a table cannot be read."""

    def __init__(self, table_name: str, reason: str) -> None:
        self.table_name = table_name
        self.reason = reason
        super().__init__(f"Cannot introspect table '{table_name}': {reason}")


# ---------------------------------------------------------------------------
# Schema models
# ---------------------------------------------------------------------------


class ColumnInfo(BaseModel):
    """Description of a single column as reported by the catalog."""

    name: str = Field(..., description="Column name.")
    data_type: str = Field(..., description="Data type as reported by information_schema.")
    nullable: bool = Field(default=True, description="Whether the column allows NULLs.")
    default: str | None = Field(default=None, description="Server default expression, if any.")
    max_length: int | None = Field(default=None, description="character_maximum_length, if bounded.")


class ActualSchema(BaseModel):
    """Snapshot of a live table's columns, keyed by column name."""

    table_name: str = Field(..., description="Table the snapshot was taken from.")
    table_schema: str = Field(default="public", description="Schema the table lives in.")
    columns: dict[str, ColumnInfo] = Field(default_factory=dict)

    @property
    def column_types(self) -> dict[str, str]:
        """Map each column name to its reported type string."""
        return {name: col.data_type for name, col in self.columns.items()}

    @property
    def nullability(self) -> dict[str, bool]:
        return {name: col.nullable for name, col in self.columns.items()}

    @property
    def max_lengths(self) -> dict[str, int | None]:
        return {name: col.max_length for name, col in self.columns.items()}

    @property
    def defaults(self) -> dict[str, str | None]:
        return {name: col.default for name, col in self.columns.items()}

    def __contains__(self, column_name: object) -> bool:
        return column_name in self.columns

    def __len__(self) -> int:
        return len(self.columns)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def build_actual_schema(
    table_name: str,
    rows: list[dict[str, object]],
    *,
    table_schema: str = "public",
) -> ActualSchema:
    """Build an :class:`ActualSchema` from ``information_schema.columns`` rows.

    Parameters
    ----------
    table_name:
        Table the rows describe.
    rows:
        Row mappings with keys ``column_name``, ``data_type``,
        ``is_nullable`` (``'YES'``/``'NO'``), ``column_default`` and
        ``character_maximum_length``.
    table_schema:
        Schema the table lives in.

    Returns
    -------
    ActualSchema
    """
    columns: dict[str, ColumnInfo] = {}
    for row in rows:
        name = str(row["column_name"])
        max_length = row.get("character_maximum_length")
        default = row.get("column_default")
        columns[name] = ColumnInfo(
            name=name,
            data_type=str(row["data_type"]),
            nullable=str(row.get("is_nullable", "YES")).upper() == "YES",
            default=str(default) if default is not None else None,
            max_length=int(max_length) if max_length is not None else None,  # type: ignore[call-overload]
        )
    return ActualSchema(table_name=table_name, table_schema=table_schema, columns=columns)


# ---------------------------------------------------------------------------
# Introspector
# ---------------------------------------------------------------------------


class SchemaIntrospector:
    """Reads the live column set of a table over a session connection.

    Parameters
    ----------
    connection:
        The session's open connection.  The introspector never opens or
        closes connections itself.
    """

    def __init__(self, connection: AsyncConnection) -> None:
        self._conn = connection

    async def introspect(self, table_name: str, table_schema: str = "public") -> ActualSchema:
        """Return the :class:`ActualSchema` for *table_name*.

        Raises
        ------
        IntrospectionError
            If the query fails or the catalog has no columns for the table.
        """
        try:
            result = await self._conn.execute(
                _COLUMNS_QUERY,
                {"table_name": table_name, "table_schema": table_schema},
            )
            rows = [dict(row) for row in result.mappings().all()]
            # Read-only; close the implicit transaction so probes start clean.
            await self._conn.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise IntrospectionError(table_name, str(exc)) from exc

        if not rows:
            raise IntrospectionError(
                table_name,
                f"no columns found in schema '{table_schema}' (table absent or misnamed)",
            )

        schema = build_actual_schema(table_name, rows, table_schema=table_schema)
        logger.info(
            "Introspected %s.%s: %d column(s)",
            table_schema,
            table_name,
            len(schema),
        )
        return schema
