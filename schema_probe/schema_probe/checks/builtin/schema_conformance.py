"""Built-in check that wraps the schema conformance checker.

Produces one result per field and aspect so every field of the
definition is reported independently:

* ``presence`` for every field,
* ``type`` for every present field,
* ``nullability``, ``length`` and ``default`` for each aspect the field
  declares.

The introspection snapshot is taken once and stored on the context; all
results in a run are judged against that same snapshot.
"""

from __future__ import annotations

import logging

from schema_probe.checks.base import BaseCheck
from schema_probe.checks.models import (
    CheckContext,
    CheckResult,
    CheckSeverity,
    CheckStatus,
    CheckType,
    Timer,
)
from schema_probe.contracts.conformance import (
    ConformanceChecker,
    ConformanceError,
    MissingFieldError,
    TypeMismatchError,
    ViolationType,
)
from schema_probe.introspection.schema_introspector import SchemaIntrospector
from schema_probe.models.schema_definition import FieldSpec

logger = logging.getLogger(__name__)

_VIOLATION_SEVERITY_MAP: dict[ViolationType, CheckSeverity] = {
    ViolationType.MISSING_FIELD: CheckSeverity.CRITICAL,
    ViolationType.TYPE_MISMATCH: CheckSeverity.CRITICAL,
    ViolationType.NULLABILITY_MISMATCH: CheckSeverity.HIGH,
    ViolationType.LENGTH_MISMATCH: CheckSeverity.HIGH,
    ViolationType.DEFAULT_MISMATCH: CheckSeverity.MEDIUM,
}

_ASPECT_BY_VIOLATION: dict[ViolationType, str] = {
    ViolationType.NULLABILITY_MISMATCH: "nullability",
    ViolationType.LENGTH_MISMATCH: "length",
    ViolationType.DEFAULT_MISMATCH: "default",
}


def _declared_aspects(spec: FieldSpec) -> list[str]:
    aspects: list[str] = []
    if spec.nullable is not None:
        aspects.append("nullability")
    if spec.max_length is not None:
        aspects.append("length")
    if spec.has_default is not None:
        aspects.append("default")
    return aspects


class SchemaConformanceCheck(BaseCheck):
    """Compare every declared field against the live table."""

    @property
    def check_type(self) -> CheckType:
        return CheckType.SCHEMA_CONFORMANCE

    async def execute(self, context: CheckContext) -> list[CheckResult]:
        """Check presence, type and declared constraints for each field.

        :class:`~schema_probe.introspection.IntrospectionError` propagates:
        without a snapshot there is nothing to compare against.
        """
        if context.actual_schema is None:
            context.actual_schema = await SchemaIntrospector(context.connection).introspect(
                context.definition.table_name,
                context.table_schema,
            )

        checker = ConformanceChecker(context.definition, context.actual_schema)
        results: list[CheckResult] = []

        for spec in context.definition.fields():
            timer = Timer()
            timer.start()

            try:
                checker.check_field_present(spec.name)
            except MissingFieldError as exc:
                results.append(self._failure(exc, "presence", timer.elapsed_ms()))
                continue
            results.append(
                self._success(spec.name, "presence", f"Field '{spec.name}' is present.", timer.elapsed_ms())
            )

            try:
                checker.check_field_type(spec)
            except TypeMismatchError as exc:
                results.append(self._failure(exc, "type", timer.elapsed_ms()))
            else:
                results.append(
                    self._success(spec.name, "type", f"Field '{spec.name}' has type '{spec.type}'.", timer.elapsed_ms())
                )

            failed_aspects: dict[str, ConformanceError] = {
                _ASPECT_BY_VIOLATION[err.violation_type]: err for err in checker.check_field_constraints(spec)
            }
            for aspect in _declared_aspects(spec):
                err = failed_aspects.get(aspect)
                if err is not None:
                    results.append(self._failure(err, aspect, timer.elapsed_ms()))
                else:
                    results.append(
                        self._success(spec.name, aspect, f"Field '{spec.name}' {aspect} matches.", timer.elapsed_ms())
                    )

        failures = sum(1 for r in results if r.status == CheckStatus.FAIL)
        if failures:
            logger.warning("%d conformance check(s) failed for %s", failures, context.definition.table_name)
        return results

    def _success(self, target: str, aspect: str, message: str, elapsed: int) -> CheckResult:
        return CheckResult(
            check_type=self.check_type,
            target=target,
            aspect=aspect,
            status=CheckStatus.PASS,
            severity=CheckSeverity.LOW,
            message=message,
            duration_ms=elapsed,
        )

    def _failure(self, err: ConformanceError, aspect: str, elapsed: int) -> CheckResult:
        return CheckResult(
            check_type=self.check_type,
            target=err.name,
            aspect=aspect,
            status=CheckStatus.FAIL,
            severity=_VIOLATION_SEVERITY_MAP.get(err.violation_type, CheckSeverity.MEDIUM),
            message=str(err),
            detail=f"{err.violation_type.value}: expected {err.expected}, actual {err.actual}",
            duration_ms=elapsed,
        )
