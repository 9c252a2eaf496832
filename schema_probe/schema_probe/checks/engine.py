"""Check Engine -- orchestrator for conformance checks and constraint probes.

The :class:`CheckEngine` discovers registered checks, filters by the
requested check types, executes each check, and aggregates results into
a :class:`CheckSummary`.

Infrastructure failures (the table cannot be introspected, the connection
is lost) are not check results: they propagate and abort the run.
"""

from __future__ import annotations

import logging

from schema_probe.checks.base import BaseCheck
from schema_probe.checks.models import (
    CheckContext,
    CheckResult,
    CheckSeverity,
    CheckStatus,
    CheckSummary,
    CheckType,
    Timer,
)
from schema_probe.checks.registry import CheckRegistry
from schema_probe.introspection.schema_introspector import IntrospectionError
from schema_probe.probes.constraint_probe import is_fatal_database_error

logger = logging.getLogger(__name__)


def _is_fatal(exc: Exception) -> bool:
    return isinstance(exc, IntrospectionError) or is_fatal_database_error(exc)


class CheckEngine:
    """Orchestrator for running checks against one table.

    Parameters
    ----------
    registry:
        Optional pre-configured registry.  When ``None``, a new
        empty registry is created.
    """

    def __init__(self, registry: CheckRegistry | None = None) -> None:
        self._registry = registry or CheckRegistry()

    def register(self, check: BaseCheck) -> None:
        self._registry.register(check)

    async def run(self, context: CheckContext) -> CheckSummary:
        """Execute checks and return an aggregated summary.

        Raises
        ------
        IntrospectionError
            If the live schema cannot be read.
        sqlalchemy.exc.OperationalError, sqlalchemy.exc.InterfaceError, sqlalchemy.exc.ProgrammingError
            If the session connection fails, or the table is missing or not accessible.
        """
        timer = Timer()
        timer.start()

        all_results: list[CheckResult] = []

        checks_to_run = self._registry.get_all()
        if context.check_types is not None:
            requested_types = set(context.check_types)
            checks_to_run = [c for c in checks_to_run if c.check_type in requested_types]

        if not checks_to_run:
            logger.info("No checks to run (none registered or all filtered out).")
            return CheckSummary.from_results([], duration_ms=timer.elapsed_ms())

        for check in checks_to_run:
            logger.debug("Running check: %s", check.check_type.value)
            try:
                results = await check.execute(context)
            except Exception as exc:
                if _is_fatal(exc):
                    logger.error("Check %s aborted the run: %s", check.check_type.value, exc)
                    raise
                logger.error(
                    "Check %s raised an unhandled exception: %s",
                    check.check_type.value,
                    exc,
                )
                all_results.append(
                    CheckResult(
                        check_type=check.check_type,
                        target=context.definition.table_name,
                        status=CheckStatus.ERROR,
                        severity=CheckSeverity.HIGH,
                        message=f"Unhandled error in {check.check_type.value}: {exc}",
                    )
                )
                continue
            all_results.extend(results)

        summary = CheckSummary.from_results(all_results, duration_ms=timer.elapsed_ms())
        logger.info(
            "Ran %d check(s) on %s: %d passed, %d failed, %d errored",
            summary.total,
            context.definition.table_name,
            summary.passed,
            summary.failed,
            summary.errored,
        )
        return summary


def create_default_engine() -> CheckEngine:
    """Create a :class:`CheckEngine` with all built-in checks registered."""
    from schema_probe.checks.builtin.constraint_probes import ConstraintProbeCheck
    from schema_probe.checks.builtin.schema_conformance import SchemaConformanceCheck

    engine = CheckEngine()
    engine.register(SchemaConformanceCheck())
    engine.register(ConstraintProbeCheck())
    return engine
