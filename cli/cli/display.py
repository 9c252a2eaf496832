"""Rich output formatting for the schema-probe CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from schema_probe.checks import CheckSummary
    from schema_probe.probes import ConstraintScenario


# ---------------------------------------------------------------------------
# Status colour mapping
# ---------------------------------------------------------------------------

_STATUS_COLOURS: dict[str, str] = {
    "PASS": "green",
    "FAIL": "red",
    "ERROR": "bold red",
    "SKIP": "dim",
}


def _coloured_status(status: str) -> str:
    """Return a Rich markup string with the status colour-coded."""
    colour = _STATUS_COLOURS.get(status, "white")
    return f"[{colour}]{status}[/{colour}]"


def display_check_summary(console: Console, summary: CheckSummary, *, table_name: str = "") -> None:
    """Render check results grouped by check type, then a summary line.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    summary:
        The :class:`CheckSummary` returned by the check engine.
    table_name:
        Qualified table name shown in the header.
    """
    header = "[green]PASSED[/green]" if summary.ok else "[red]FAILED[/red]"
    console.print(f"\nschema-probe {table_name} -- {header}  ({summary.duration_ms}ms)\n")

    if not summary.results:
        console.print("[dim]No checks were run.[/dim]")
        return

    by_type: dict[str, list] = {}
    for result in summary.results:
        by_type.setdefault(result.check_type.value, []).append(result)

    for check_type, results in by_type.items():
        table = Table(title=check_type, show_lines=False, pad_edge=True, expand=False)
        table.add_column("Target", style="bold")
        table.add_column("Aspect")
        table.add_column("Status")
        table.add_column("Severity")
        table.add_column("Message")

        for r in results:
            message = r.message
            if r.detail and r.status.value != "PASS":
                message = f"{message}\n[dim]{r.detail}[/dim]"
            table.add_row(
                r.target,
                r.aspect or "-",
                _coloured_status(r.status.value),
                r.severity.value,
                message,
            )
        console.print(table)

    console.print(
        f"\n{summary.total} check(s): "
        f"[green]{summary.passed} passed[/green], "
        f"[red]{summary.failed} failed[/red], "
        f"{summary.errored} errored, "
        f"{summary.skipped} skipped\n"
    )


def display_scenarios(console: Console, scenarios: list[ConstraintScenario]) -> None:
    """Render the scenario table."""
    if not scenarios:
        console.print("[dim]No scenarios defined.[/dim]")
        return

    table = Table(title=f"Scenarios ({len(scenarios)})", show_lines=False, pad_edge=True, expand=False)
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Expected")
    table.add_column("Reason")

    for s in scenarios:
        kind = s.expected.kind.value
        style = "green" if kind == "ACCEPTED" else "yellow"
        table.add_row(s.name, s.description, f"[{style}]{kind}[/{style}]", s.expected.reason or "-")

    console.print(table)
