"""Constraint probe: insert attempts that exercise the live table's rules.

Each scenario runs as one unit of work on the session connection:

1. ``attempt`` -- INSERT (plus readback of the inserted row) inside its own
   transaction.  A constraint rejection rolls that transaction back and is
   captured as an outcome, never raised.
2. ``evaluate`` -- compare the outcome with the scenario's expectation.
3. ``cleanup`` -- ``TRUNCATE`` the table in a separate transaction.

Cleanup always runs, including when the insert was rejected and when the
caller's assertion fails inside :meth:`ConstraintProbe.scope`.

Connection-level and access failures (:class:`~sqlalchemy.exc.OperationalError`,
:class:`~sqlalchemy.exc.InterfaceError`, :class:`~sqlalchemy.exc.ProgrammingError`
such as a missing relation or denied privilege, invalidated connections) are
not rejections: they propagate and end the session.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from schema_probe.models.schema_definition import SchemaDefinition
from schema_probe.probes.rejection import RejectionReason, classify_rejection
from schema_probe.probes.scenarios import (
    ConstraintScenario,
    OutcomeKind,
    ReadbackCheck,
    ReadbackKind,
    SqlFunction,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL identifier allowlist validation
# ---------------------------------------------------------------------------

_SAFE_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_SAFE_TYPE_NAME_RE = re.compile(r"^[a-z][a-z0-9 ]*$")


def _validate_identifier(name: str) -> str:
    """Validate that *name* is a safe, unquoted SQL identifier.

    Raises
    ------
    ValueError
        If *name* contains characters outside the allowlist.
    """
    if not _SAFE_IDENTIFIER_RE.match(name):
        raise ValueError(f"Unsafe SQL identifier: {name!r}")
    return name


def _validate_type_name(type_name: str) -> str:
    """Validate a catalog type name (e.g. ``timestamp with time zone``) for use in CAST."""
    if not _SAFE_TYPE_NAME_RE.match(type_name):
        raise ValueError(f"Unsafe SQL type name: {type_name!r}")
    return type_name


def is_fatal_database_error(exc: BaseException) -> bool:
    """True for errors that mean the session cannot go on, as opposed to a rejected row."""
    if isinstance(exc, (OperationalError, InterfaceError, ProgrammingError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _to_text_literal(value: Any) -> str | None:
    """Render a scenario value as the text the server will parse."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class ProbeOutcome(BaseModel):
    """What actually happened when a scenario's insert was attempted."""

    kind: OutcomeKind
    rows_affected: int = 0
    row: dict[str, Any] | None = Field(
        default=None,
        description="The inserted row as read back, when the scenario has a key.",
    )
    rejection: RejectionReason | None = None

    @property
    def accepted(self) -> bool:
        return self.kind == OutcomeKind.ACCEPTED


class ProbeResult(BaseModel):
    """Outcome of a scenario plus the verdict against its expectation."""

    scenario_name: str
    outcome: ProbeOutcome
    failures: list[str] = Field(default_factory=list)
    duration_ms: int = 0

    @property
    def passed(self) -> bool:
        return not self.failures


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------


class ConstraintProbe:
    """Runs constraint scenarios against the live table.

    Parameters
    ----------
    connection:
        The session's open connection.  It must not be inside a
        transaction when a scenario starts.
    definition:
        Schema the scenarios are written against.  Only declared columns
        may appear in a scenario, and each value is cast to the declared
        type.
    table_schema:
        Schema the table lives in.  Every statement names the table
        schema-qualified, so ``search_path`` never picks the target.
    """

    def __init__(
        self,
        connection: AsyncConnection,
        definition: SchemaDefinition,
        table_schema: str = "public",
    ) -> None:
        self._conn = connection
        self._definition = definition
        self._table = f"{_validate_identifier(table_schema)}.{_validate_identifier(definition.table_name)}"

    @property
    def qualified_table(self) -> str:
        return self._table

    # -- statement building --------------------------------------------------

    def build_insert(self, scenario: ConstraintScenario) -> tuple[str, dict[str, str | None]]:
        """Return the INSERT statement and bind parameters for *scenario*.

        Raises
        ------
        ValueError
            If the scenario names a column the definition does not declare,
            or any identifier or type name fails the allowlist.
        """
        columns: list[str] = []
        values: list[str] = []
        params: dict[str, str | None] = {}

        for index, (column, value) in enumerate(scenario.column_values.items()):
            spec = self._definition.field(column)
            if spec is None:
                raise ValueError(f"Column {column!r} is not declared for table {self._table!r}")
            columns.append(_validate_identifier(column))

            if isinstance(value, SqlFunction):
                values.append(value.value)
                continue

            param = f"v{index}"
            params[param] = _to_text_literal(value)
            values.append(f"CAST(CAST(:{param} AS TEXT) AS {_validate_type_name(spec.type)})")

        if not columns:
            return f"INSERT INTO {self._table} DEFAULT VALUES", params

        sql = f"INSERT INTO {self._table} ({', '.join(columns)}) VALUES ({', '.join(values)})"
        return sql, params

    # -- unit of work ----------------------------------------------------------

    async def attempt(self, scenario: ConstraintScenario) -> ProbeOutcome:
        """Attempt the scenario's insert and capture what the engine did."""
        sql, params = self.build_insert(scenario)
        try:
            async with self._conn.begin():
                result = await self._conn.execute(text(sql), params)
                rows_affected = result.rowcount
                row = await self._read_back(scenario.key_email)
        except DBAPIError as exc:
            if is_fatal_database_error(exc):
                raise
            message = str(exc.orig) if exc.orig is not None else str(exc)
            reason = classify_rejection(message)
            logger.debug("Scenario %s rejected: %s", scenario.name, reason.kind.value)
            return ProbeOutcome(kind=OutcomeKind.REJECTED, rejection=reason)

        logger.debug("Scenario %s accepted: %d row(s)", scenario.name, rows_affected)
        return ProbeOutcome(kind=OutcomeKind.ACCEPTED, rows_affected=rows_affected, row=row)

    async def _read_back(self, email: str | None) -> dict[str, Any] | None:
        if email is None:
            return None
        result = await self._conn.execute(
            text(f"SELECT * FROM {self._table} WHERE email = :email"),
            {"email": email},
        )
        mapping = result.mappings().first()
        return dict(mapping) if mapping is not None else None

    async def cleanup(self) -> None:
        """Remove every row from the table in its own transaction."""
        if self._conn.in_transaction():
            await self._conn.rollback()
        async with self._conn.begin():
            await self._conn.execute(text(f"TRUNCATE {self._table}"))

    @asynccontextmanager
    async def scope(self) -> AsyncGenerator[ConstraintProbe, None]:
        """Yield the probe and truncate the table on exit, whatever happens.

        When the block already failed, a failing cleanup is logged and the
        original exception is the one that propagates.
        """
        try:
            yield self
        except BaseException:
            try:
                await self.cleanup()
            except (SQLAlchemyError, OSError) as cleanup_exc:
                logger.error("Cleanup of %s failed after an earlier error: %s", self._table, cleanup_exc)
            raise
        await self.cleanup()

    # -- verdict ---------------------------------------------------------------

    def evaluate(self, scenario: ConstraintScenario, outcome: ProbeOutcome) -> list[str]:
        """Return the ways *outcome* departs from the scenario's expectation."""
        expected = scenario.expected
        failures: list[str] = []

        if expected.kind == OutcomeKind.ACCEPTED:
            if not outcome.accepted:
                detail = outcome.rejection.message if outcome.rejection else "(no message)"
                return [f"Expected insert to be accepted, but it was rejected: {detail}"]
            if outcome.rows_affected != expected.rows_affected:
                failures.append(
                    f"Expected {expected.rows_affected} row(s) affected, got {outcome.rows_affected}"
                )
            for check in scenario.readback_checks:
                failure = _evaluate_readback(check, outcome.row)
                if failure:
                    failures.append(failure)
            return failures

        if outcome.accepted or outcome.rejection is None:
            return [f"Expected rejection containing {expected.reason!r}, but the insert was accepted"]

        if expected.reason and expected.reason not in outcome.rejection.message:
            failures.append(
                f"Rejection message does not contain {expected.reason!r}: {outcome.rejection.message}"
            )
        if expected.error_kind is not None and outcome.rejection.kind != expected.error_kind:
            failures.append(
                f"Expected rejection kind {expected.error_kind.value}, got {outcome.rejection.kind.value}"
            )
        return failures

    async def run(self, scenario: ConstraintScenario) -> ProbeResult:
        """Attempt, evaluate and clean up one scenario."""
        start = time.monotonic()
        async with self.scope():
            outcome = await self.attempt(scenario)
            failures = self.evaluate(scenario, outcome)
        duration = int((time.monotonic() - start) * 1000)

        if failures:
            logger.warning("Scenario %s failed: %s", scenario.name, "; ".join(failures))
        return ProbeResult(
            scenario_name=scenario.name,
            outcome=outcome,
            failures=failures,
            duration_ms=duration,
        )

    async def run_all(self, scenarios: Sequence[ConstraintScenario]) -> list[ProbeResult]:
        """Run scenarios one after another, in the order given."""
        results: list[ProbeResult] = []
        for scenario in scenarios:
            results.append(await self.run(scenario))
        return results


def _evaluate_readback(check: ReadbackCheck, row: dict[str, Any] | None) -> str | None:
    if row is None:
        return f"No row read back to check {check.column}"
    if check.column not in row:
        return f"Column {check.column} missing from read-back row"

    value = row[check.column]
    if check.kind == ReadbackKind.NOT_NULL:
        return None if value is not None else f"Expected {check.column} to be populated, got NULL"
    if check.kind == ReadbackKind.EQUALS:
        return None if value == check.value else f"Expected {check.column} == {check.value!r}, got {value!r}"
    if check.kind == ReadbackKind.CURRENT_YEAR:
        if not isinstance(value, datetime):
            return f"Expected {check.column} to be a timestamp, got {value!r}"
        current_year = datetime.now().astimezone().year
        actual_year = value.astimezone().year
        if actual_year != current_year:
            return f"Expected {check.column} in year {current_year}, got {actual_year}"
        return None
    raise ValueError(f"Unknown readback check: {check.kind}")
