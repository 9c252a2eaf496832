"""One probe session: connect, introspect once, run checks, disconnect."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from schema_probe.checks import CheckContext, CheckSummary, CheckType, create_default_engine
from schema_probe.config import Settings
from schema_probe.introspection.schema_introspector import SchemaIntrospector
from schema_probe.models.schema_definition import USERS_SCHEMA, SchemaDefinition
from schema_probe.probes.scenarios import USERS_SCENARIOS, ConstraintScenario
from schema_probe.state.database import connection_scope

logger = logging.getLogger(__name__)


async def run_session(
    settings: Settings,
    *,
    definition: SchemaDefinition | None = None,
    scenarios: Sequence[ConstraintScenario] | None = None,
    include_probes: bool = True,
    scenario_names: list[str] | None = None,
) -> CheckSummary:
    """Run every check against the configured table over a single connection.

    The table name from *settings* overrides the definition's own name.
    Probes truncate the table, so *include_probes* must only be left on
    for disposable databases.
    """
    definition = definition or USERS_SCHEMA
    if settings.table_name != definition.table_name:
        definition = definition.model_copy(update={"table_name": settings.table_name})

    check_types = [CheckType.SCHEMA_CONFORMANCE]
    if include_probes:
        check_types.append(CheckType.CONSTRAINT_PROBE)

    async with connection_scope(
        settings.database_url,
        statement_timeout_ms=settings.statement_timeout_ms,
        echo=settings.echo_sql,
    ) as conn:
        actual = await SchemaIntrospector(conn).introspect(definition.table_name, settings.table_schema)
        context = CheckContext(
            connection=conn,
            definition=definition,
            actual_schema=actual,
            table_schema=settings.table_schema,
            scenarios=list(scenarios if scenarios is not None else USERS_SCENARIOS),
            check_types=check_types,
            scenario_names=scenario_names,
        )
        return await create_default_engine().run(context)
