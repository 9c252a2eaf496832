"""Data models for the check engine.

Defines the check categories, result statuses, severity levels and the
summary aggregation shared by every check implementation.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from schema_probe.introspection.schema_introspector import ActualSchema
from schema_probe.models.schema_definition import SchemaDefinition
from schema_probe.probes.scenarios import ConstraintScenario


class CheckType(str, Enum):
    """Category of check."""

    SCHEMA_CONFORMANCE = "SCHEMA_CONFORMANCE"
    CONSTRAINT_PROBE = "CONSTRAINT_PROBE"


class CheckStatus(str, Enum):
    """Outcome of a single check execution."""

    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"
    SKIP = "SKIP"


class CheckSeverity(str, Enum):
    """How critical a check failure is."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class CheckResult(BaseModel):
    """The outcome of a single check execution."""

    check_type: CheckType = Field(..., description="Category of check that produced this result.")
    target: str = Field(..., description="Field or scenario the check was run against.")
    aspect: str = Field(default="", description="What was checked on the target (presence, type, ...).")
    status: CheckStatus = Field(..., description="Outcome of the check execution.")
    severity: CheckSeverity = Field(
        default=CheckSeverity.MEDIUM,
        description="How critical this result is when status is FAIL.",
    )
    message: str = Field(default="", description="Human-readable description of the result.")
    detail: str = Field(default="", description="Additional context (expected/actual, engine message).")
    duration_ms: int = Field(default=0, description="Execution time in milliseconds.")


class CheckSummary(BaseModel):
    """Aggregated results across multiple check executions.

    Results keep the order in which the checks produced them: field
    declaration order for conformance, table order for scenarios.
    """

    total: int = Field(default=0, description="Total number of checks executed.")
    passed: int = Field(default=0, description="Number of checks that passed.")
    failed: int = Field(default=0, description="Number of checks that failed.")
    errored: int = Field(default=0, description="Number of checks that encountered errors.")
    skipped: int = Field(default=0, description="Number of checks that were skipped.")
    blocking_failures: int = Field(
        default=0,
        description="Number of FAIL or ERROR results with severity CRITICAL or HIGH.",
    )
    results: list[CheckResult] = Field(default_factory=list, description="All individual check results.")
    duration_ms: int = Field(default=0, description="Total execution time in milliseconds.")

    @property
    def ok(self) -> bool:
        """True when nothing failed or errored."""
        return self.failed == 0 and self.errored == 0

    def results_for(self, check_type: CheckType) -> list[CheckResult]:
        return [r for r in self.results if r.check_type == check_type]

    @staticmethod
    def from_results(results: list[CheckResult], duration_ms: int = 0) -> CheckSummary:
        """Build a summary from a list of check results."""
        passed = sum(1 for r in results if r.status == CheckStatus.PASS)
        failed = sum(1 for r in results if r.status == CheckStatus.FAIL)
        errored = sum(1 for r in results if r.status == CheckStatus.ERROR)
        skipped = sum(1 for r in results if r.status == CheckStatus.SKIP)
        blocking = sum(
            1
            for r in results
            if r.status in (CheckStatus.FAIL, CheckStatus.ERROR)
            and r.severity in (CheckSeverity.CRITICAL, CheckSeverity.HIGH)
        )

        return CheckSummary(
            total=len(results),
            passed=passed,
            failed=failed,
            errored=errored,
            skipped=skipped,
            blocking_failures=blocking,
            results=list(results),
            duration_ms=duration_ms,
        )


class CheckContext(BaseModel):
    """Context passed to check implementations during execution.

    Holds the session connection, the expected schema, the introspection
    snapshot shared by every conformance check, and the scenarios to probe.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    definition: SchemaDefinition
    connection: Any = Field(default=None, description="Open AsyncConnection for the session.")
    actual_schema: ActualSchema | None = Field(
        default=None,
        description="Introspection snapshot; taken once per session.",
    )
    table_schema: str = Field(default="public", description="Schema the table lives in.")
    scenarios: list[ConstraintScenario] = Field(default_factory=list)
    check_types: list[CheckType] | None = Field(
        default=None,
        description="When set, only run checks of these types. None means run all.",
    )
    scenario_names: list[str] | None = Field(
        default=None,
        description="When set, only probe these scenarios. None means run all.",
    )

    def selected_scenarios(self) -> list[ConstraintScenario]:
        if self.scenario_names is None:
            return list(self.scenarios)
        wanted = set(self.scenario_names)
        return [s for s in self.scenarios if s.name in wanted]


class Timer:
    """Simple monotonic timer for measuring check execution duration."""

    def __init__(self) -> None:
        self._start: float = 0.0

    def start(self) -> None:
        self._start = time.monotonic()

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._start) * 1000)
