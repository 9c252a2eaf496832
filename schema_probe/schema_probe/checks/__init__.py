"""Check engine for the schema probe.

Quick start::

    from schema_probe.checks import create_default_engine, CheckContext

    engine = create_default_engine()
    context = CheckContext(connection=conn, definition=USERS_SCHEMA, scenarios=list(USERS_SCENARIOS))
    summary = await engine.run(context)
    print(summary.total, summary.passed, summary.failed)
"""

from schema_probe.checks.base import BaseCheck
from schema_probe.checks.engine import CheckEngine, create_default_engine
from schema_probe.checks.models import (
    CheckContext,
    CheckResult,
    CheckSeverity,
    CheckStatus,
    CheckSummary,
    CheckType,
)
from schema_probe.checks.registry import CheckRegistry

__all__ = [
    "BaseCheck",
    "CheckContext",
    "CheckEngine",
    "CheckRegistry",
    "CheckResult",
    "CheckSeverity",
    "CheckStatus",
    "CheckSummary",
    "CheckType",
    "create_default_engine",
]
