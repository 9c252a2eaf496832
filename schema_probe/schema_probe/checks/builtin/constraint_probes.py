"""Built-in check that runs constraint scenarios against the live table.

One result per scenario, in the order the scenarios are listed.  The
table is truncated after every scenario by :class:`ConstraintProbe`.

A scenario that breaks in an unexpected but non-fatal way (a bad
scenario definition, a statement timeout) is recorded as ERROR for that
scenario and the rest still run.  Fatal database errors propagate.
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
)
from schema_probe.probes.constraint_probe import ConstraintProbe, ProbeResult, is_fatal_database_error

logger = logging.getLogger(__name__)


def _outcome_detail(result: ProbeResult) -> str:
    outcome = result.outcome
    if outcome.accepted:
        return f"accepted ({outcome.rows_affected} row(s))"
    if outcome.rejection is not None:
        return f"rejected [{outcome.rejection.kind.value}]: {outcome.rejection.message}"
    return "rejected"


class ConstraintProbeCheck(BaseCheck):
    """Attempt each scenario's insert and compare with its expected outcome."""

    @property
    def check_type(self) -> CheckType:
        return CheckType.CONSTRAINT_PROBE

    async def execute(self, context: CheckContext) -> list[CheckResult]:
        scenarios = context.selected_scenarios()
        if not scenarios:
            logger.info("No constraint scenarios selected.")
            return []

        probe = ConstraintProbe(context.connection, context.definition, context.table_schema)
        results: list[CheckResult] = []

        for scenario in scenarios:
            try:
                probe_result = await probe.run(scenario)
            except Exception as exc:
                if is_fatal_database_error(exc):
                    raise
                logger.error("Scenario %s could not be run: %s", scenario.name, exc)
                results.append(
                    CheckResult(
                        check_type=self.check_type,
                        target=scenario.name,
                        aspect=scenario.expected.kind.value.lower(),
                        status=CheckStatus.ERROR,
                        severity=CheckSeverity.HIGH,
                        message=f"Scenario could not be run: {exc}",
                    )
                )
                continue

            if probe_result.passed:
                results.append(
                    CheckResult(
                        check_type=self.check_type,
                        target=scenario.name,
                        aspect=scenario.expected.kind.value.lower(),
                        status=CheckStatus.PASS,
                        severity=CheckSeverity.LOW,
                        message=scenario.description or scenario.name,
                        detail=_outcome_detail(probe_result),
                        duration_ms=probe_result.duration_ms,
                    )
                )
            else:
                results.append(
                    CheckResult(
                        check_type=self.check_type,
                        target=scenario.name,
                        aspect=scenario.expected.kind.value.lower(),
                        status=CheckStatus.FAIL,
                        severity=CheckSeverity.HIGH,
                        message="; ".join(probe_result.failures),
                        detail=_outcome_detail(probe_result),
                        duration_ms=probe_result.duration_ms,
                    )
                )

        return results
