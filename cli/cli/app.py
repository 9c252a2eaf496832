"""schema-probe CLI application -- Typer-based developer interface.

Provides commands for checking a live ``users`` table against its
expected schema and for listing the constraint scenarios.  Human-readable
output goes to *stderr* via Rich; ``--json`` output goes to *stdout* so
that pipelines can compose cleanly.

Exit codes: 0 when every check passes, 1 when any check fails, 3 on
configuration or infrastructure errors.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import typer
from pydantic import ValidationError
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from cli.display import display_check_summary, display_scenarios

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

EXIT_OK = 0
EXIT_CHECKS_FAILED = 1
EXIT_INFRASTRUCTURE = 3

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="schema-probe",
    help="schema-probe - verify a live PostgreSQL table against its expected schema.",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_json_output: bool = False


@app.callback()
def _global_options(
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit structured JSON to stdout instead of human-readable output.",
    ),
) -> None:
    """Global options applied to every command."""
    global _json_output  # noqa: PLW0603
    _json_output = json_mode


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@app.command()
def check(
    database_url: str | None = typer.Option(
        None,
        "--database-url",
        help="PostgreSQL URL. Defaults to SCHEMA_PROBE_DATABASE_URL or DATABASE_URL.",
    ),
    table: str | None = typer.Option(None, "--table", help="Table to check (default: users)."),
    schema: str | None = typer.Option(None, "--schema", help="Schema the table lives in (default: public)."),
    skip_probes: bool = typer.Option(
        False,
        "--skip-probes",
        help="Only check the schema; do not insert rows or truncate the table.",
    ),
    scenario: list[str] | None = typer.Option(
        None,
        "--scenario",
        help="Run only the named scenario. Repeatable.",
    ),
    json_flag: bool = typer.Option(False, "--json", help="Emit the summary as JSON on stdout."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Check the live table's fields and probe its constraints.

    Constraint probes insert rows and TRUNCATE the table after each one:
    point this only at a disposable database, or pass --skip-probes.

    Examples::

        schema-probe check --database-url postgresql://localhost/test
        schema-probe check --skip-probes --json
        schema-probe check --scenario valid_user --scenario missing_city
    """
    from schema_probe.config import load_settings
    from schema_probe.introspection import IntrospectionError
    from schema_probe.probes import USERS_SCENARIOS
    from schema_probe.session import run_session

    json_mode = json_flag or _json_output

    overrides: dict[str, object] = {}
    if database_url is not None:
        overrides["database_url"] = database_url
    if table is not None:
        overrides["table_name"] = table
    if schema is not None:
        overrides["table_schema"] = schema

    try:
        settings = load_settings(**overrides)
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        raise typer.Exit(code=EXIT_INFRASTRUCTURE) from exc

    _configure_logging(verbose or settings.debug)
    logger.debug("Checking %s.%s (probes: %s)", settings.table_schema, settings.table_name, not skip_probes)

    if scenario:
        known = {s.name for s in USERS_SCENARIOS}
        unknown = sorted(set(scenario) - known)
        if unknown:
            console.print(f"[red]Unknown scenario(s): {', '.join(unknown)}[/red]")
            raise typer.Exit(code=EXIT_INFRASTRUCTURE)

    try:
        summary = asyncio.run(
            run_session(
                settings,
                include_probes=not skip_probes,
                scenario_names=list(scenario) if scenario else None,
            )
        )
    except IntrospectionError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=EXIT_INFRASTRUCTURE) from exc
    except (SQLAlchemyError, OSError) as exc:
        console.print(f"[red]Database error: {exc}[/red]")
        raise typer.Exit(code=EXIT_INFRASTRUCTURE) from exc

    if json_mode:
        sys.stdout.write(json.dumps(summary.model_dump(mode="json"), indent=2) + "\n")
    else:
        display_check_summary(console, summary, table_name=f"{settings.table_schema}.{settings.table_name}")

    if not summary.ok:
        raise typer.Exit(code=EXIT_CHECKS_FAILED)


# ---------------------------------------------------------------------------
# scenarios
# ---------------------------------------------------------------------------


@app.command()
def scenarios() -> None:
    """List the constraint scenarios and their expected outcomes."""
    from schema_probe.probes import USERS_SCENARIOS

    if _json_output:
        rows = [
            {
                "name": s.name,
                "description": s.description,
                "expected": s.expected.kind.value,
                "reason": s.expected.reason,
            }
            for s in USERS_SCENARIOS
        ]
        sys.stdout.write(json.dumps(rows, indent=2) + "\n")
        return

    display_scenarios(console, list(USERS_SCENARIOS))
