"""Schema conformance checker.

Compares a :class:`SchemaDefinition` against an :class:`ActualSchema`
snapshot.  Every field is checked independently: a failure on one field
never prevents the others from being checked, and :meth:`check_all`
collects every failure instead of stopping at the first.

Violation types
---------------
* **MISSING_FIELD** -- an expected column is absent from the live table.
* **TYPE_MISMATCH** -- the column exists but its reported type differs
  from the expected type.  Comparison is exact string equality.
* **NULLABILITY_MISMATCH** -- the field declares a nullability and the
  live column disagrees.
* **LENGTH_MISMATCH** -- the field declares a maximum length and the live
  column's ``character_maximum_length`` differs.
* **DEFAULT_MISMATCH** -- the field declares whether a server default
  exists and the live column disagrees.

A missing field is reported once, as MISSING_FIELD; its type and
constraint aspects are not checked.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, Field

from schema_probe.introspection.schema_introspector import ActualSchema
from schema_probe.models.schema_definition import FieldSpec, SchemaDefinition

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Violation models
# ---------------------------------------------------------------------------


class ViolationType(str, Enum):
    """Kind of conformance failure."""

    MISSING_FIELD = "MISSING_FIELD"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    NULLABILITY_MISMATCH = "NULLABILITY_MISMATCH"
    LENGTH_MISMATCH = "LENGTH_MISMATCH"
    DEFAULT_MISMATCH = "DEFAULT_MISMATCH"


class ConformanceViolation(BaseModel):
    """A single conformance failure for one field."""

    column_name: str = Field(..., description="Field the violation applies to.")
    violation_type: ViolationType = Field(..., description="Kind of failure.")
    expected: str = Field(default="", description="What the definition declares.")
    actual: str = Field(default="", description="What the live table reports.")
    message: str = Field(default="", description="Human-readable description of the violation.")


class ConformanceReport(BaseModel):
    """Result of checking every field of a definition."""

    table_name: str
    fields_checked: int = 0
    violations: list[ConformanceViolation] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations

    def violations_for(self, column_name: str) -> list[ConformanceViolation]:
        """Return violations filtered to a specific field."""
        return [v for v in self.violations if v.column_name == column_name]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConformanceError(Exception):
    """Base class for per-field conformance failures."""

    violation_type: ViolationType

    def __init__(self, name: str, message: str, *, expected: str = "", actual: str = "") -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(message)

    def to_violation(self) -> ConformanceViolation:
        return ConformanceViolation(
            column_name=self.name,
            violation_type=self.violation_type,
            expected=self.expected,
            actual=self.actual,
            message=str(self),
        )


class MissingFieldError(ConformanceError):
    """An expected field is not present in the live table."""

    violation_type = ViolationType.MISSING_FIELD

    def __init__(self, name: str) -> None:
        super().__init__(
            name,
            f"Expected field '{name}' is missing from the table.",
            expected=name,
            actual="(missing)",
        )


class TypeMismatchError(ConformanceError):
    """A field exists but is reported with a different type."""

    violation_type = ViolationType.TYPE_MISMATCH

    def __init__(self, name: str, expected: str, actual: str) -> None:
        super().__init__(
            name,
            f"Field '{name}' has type '{actual}', expected '{expected}'.",
            expected=expected,
            actual=actual,
        )


class NullabilityMismatchError(ConformanceError):
    """A field's nullability differs from the declared one."""

    violation_type = ViolationType.NULLABILITY_MISMATCH

    def __init__(self, name: str, expected_nullable: bool, actual_nullable: bool) -> None:
        expected = "NULL" if expected_nullable else "NOT NULL"
        actual = "NULL" if actual_nullable else "NOT NULL"
        super().__init__(
            name,
            f"Field '{name}' is {actual}, expected {expected}.",
            expected=expected,
            actual=actual,
        )


class LengthMismatchError(ConformanceError):
    """A bounded text field declares a different maximum length."""

    violation_type = ViolationType.LENGTH_MISMATCH

    def __init__(self, name: str, expected_length: int, actual_length: int | None) -> None:
        actual = str(actual_length) if actual_length is not None else "(unbounded)"
        super().__init__(
            name,
            f"Field '{name}' has maximum length {actual}, expected {expected_length}.",
            expected=str(expected_length),
            actual=actual,
        )


class DefaultMismatchError(ConformanceError):
    """A field is expected to have (or lack) a server default."""

    violation_type = ViolationType.DEFAULT_MISMATCH

    def __init__(self, name: str, expected_default: bool, actual_default: str | None) -> None:
        expected = "(a default)" if expected_default else "(no default)"
        actual = actual_default if actual_default is not None else "(no default)"
        super().__init__(
            name,
            f"Field '{name}' has default {actual}, expected {expected}.",
            expected=expected,
            actual=actual,
        )


# ---------------------------------------------------------------------------
# Checker
# ---------------------------------------------------------------------------


class ConformanceChecker:
    """Checks a definition against one introspection snapshot.

    Parameters
    ----------
    definition:
        The expected schema.
    actual:
        The snapshot returned by :class:`SchemaIntrospector`.  It is never
        refreshed by the checker.
    """

    def __init__(self, definition: SchemaDefinition, actual: ActualSchema) -> None:
        self._definition = definition
        self._actual = actual

    @property
    def definition(self) -> SchemaDefinition:
        return self._definition

    def check_field_present(self, name: str) -> None:
        """Raise :class:`MissingFieldError` if *name* is not a live column."""
        if name not in self._actual.columns:
            raise MissingFieldError(name)

    def check_field_type(self, spec: FieldSpec) -> None:
        """Raise :class:`TypeMismatchError` unless the reported type equals ``spec.type``.

        Raises :class:`MissingFieldError` first when the field is absent.
        """
        self.check_field_present(spec.name)
        actual_type = self._actual.columns[spec.name].data_type
        if actual_type != spec.type:
            raise TypeMismatchError(spec.name, spec.type, actual_type)

    def check_field_constraints(self, spec: FieldSpec) -> list[ConformanceError]:
        """Return nullability, length and default failures for the aspects *spec* declares."""
        self.check_field_present(spec.name)
        column = self._actual.columns[spec.name]
        errors: list[ConformanceError] = []

        if spec.nullable is not None and column.nullable != spec.nullable:
            errors.append(NullabilityMismatchError(spec.name, spec.nullable, column.nullable))

        if spec.max_length is not None and column.max_length != spec.max_length:
            errors.append(LengthMismatchError(spec.name, spec.max_length, column.max_length))

        if spec.has_default is not None and (column.default is not None) != spec.has_default:
            errors.append(DefaultMismatchError(spec.name, spec.has_default, column.default))

        return errors

    def check_all(self) -> ConformanceReport:
        """Check every field and return all failures."""
        violations: list[ConformanceViolation] = []

        for spec in self._definition.fields():
            try:
                self.check_field_present(spec.name)
            except MissingFieldError as exc:
                violations.append(exc.to_violation())
                continue

            try:
                self.check_field_type(spec)
            except TypeMismatchError as exc:
                violations.append(exc.to_violation())

            violations.extend(err.to_violation() for err in self.check_field_constraints(spec))

        if violations:
            logger.warning(
                "Table %s has %d conformance violation(s)",
                self._definition.table_name,
                len(violations),
            )

        return ConformanceReport(
            table_name=self._definition.table_name,
            fields_checked=len(self._definition.fields()),
            violations=violations,
        )
