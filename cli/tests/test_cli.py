"""Tests for cli/cli/app.py -- the schema-probe CLI application.

Uses typer.testing.CliRunner to invoke each command, with the probe
session mocked so that tests are fast, deterministic, and do not need a
PostgreSQL server.

Because the commands use *local* imports (``from schema_probe.session
import run_session`` inside the function body), mocks target the source
modules rather than ``cli.app``.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

from sqlalchemy.exc import OperationalError, ProgrammingError
from typer.testing import CliRunner

from cli.app import app
from schema_probe.checks import CheckResult, CheckSeverity, CheckStatus, CheckSummary, CheckType
from schema_probe.introspection import IntrospectionError
from schema_probe.probes import USERS_SCENARIOS

runner = CliRunner()

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _summary(*statuses: CheckStatus) -> CheckSummary:
    results = [
        CheckResult(
            check_type=CheckType.SCHEMA_CONFORMANCE,
            target=f"field_{i}",
            aspect="type",
            status=status,
            severity=CheckSeverity.CRITICAL if status == CheckStatus.FAIL else CheckSeverity.LOW,
            message=f"result {i}",
        )
        for i, status in enumerate(statuses)
    ]
    return CheckSummary.from_results(results, duration_ms=5)


def _patch_session(**kwargs):
    return patch("schema_probe.session.run_session", new=AsyncMock(**kwargs))


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheckCommand:
    def test_all_pass_exits_zero(self):
        with _patch_session(return_value=_summary(CheckStatus.PASS, CheckStatus.PASS)):
            result = runner.invoke(app, ["check", "--database-url", "postgresql://x@y/z"])
        assert result.exit_code == 0, result.output

    def test_failure_exits_one(self):
        with _patch_session(return_value=_summary(CheckStatus.PASS, CheckStatus.FAIL)):
            result = runner.invoke(app, ["check", "--database-url", "postgresql://x@y/z"])
        assert result.exit_code == 1

    def test_json_output(self):
        with _patch_session(return_value=_summary(CheckStatus.PASS)):
            result = runner.invoke(app, ["check", "--database-url", "postgresql://x@y/z", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["total"] == 1
        assert payload["results"][0]["target"] == "field_0"
        assert payload["results"][0]["status"] == "PASS"

    def test_global_json_flag(self):
        with _patch_session(return_value=_summary(CheckStatus.PASS)):
            result = runner.invoke(app, ["--json", "check", "--database-url", "postgresql://x@y/z"])
        assert json.loads(result.stdout)["passed"] == 1

    def test_options_reach_session(self):
        mock = AsyncMock(return_value=_summary(CheckStatus.PASS))
        with patch("schema_probe.session.run_session", new=mock):
            runner.invoke(
                app,
                [
                    "check",
                    "--database-url",
                    "postgres://u@h/db",
                    "--table",
                    "accounts",
                    "--schema",
                    "auth",
                    "--skip-probes",
                ],
            )
        settings = mock.await_args.args[0]
        assert settings.database_url == "postgresql+asyncpg://u@h/db"
        assert settings.table_name == "accounts"
        assert settings.table_schema == "auth"
        assert mock.await_args.kwargs["include_probes"] is False
        assert mock.await_args.kwargs["scenario_names"] is None

    def test_scenario_selection(self):
        mock = AsyncMock(return_value=_summary(CheckStatus.PASS))
        with patch("schema_probe.session.run_session", new=mock):
            result = runner.invoke(
                app,
                ["check", "--database-url", "postgresql://x@y/z", "--scenario", "valid_user"],
            )
        assert result.exit_code == 0
        assert mock.await_args.kwargs["scenario_names"] == ["valid_user"]

    def test_unknown_scenario_exits_three(self):
        with _patch_session(return_value=_summary()) as mock:
            result = runner.invoke(
                app,
                ["check", "--database-url", "postgresql://x@y/z", "--scenario", "nope"],
            )
        assert result.exit_code == 3
        mock.assert_not_awaited()

    def test_introspection_error_exits_three(self):
        with _patch_session(side_effect=IntrospectionError("users", "no columns found")):
            result = runner.invoke(app, ["check", "--database-url", "postgresql://x@y/z"])
        assert result.exit_code == 3

    def test_connection_error_exits_three(self):
        error = OperationalError("connect", {}, Exception("connection refused"))
        with _patch_session(side_effect=error):
            result = runner.invoke(app, ["check", "--database-url", "postgresql://x@y/z"])
        assert result.exit_code == 3

    def test_missing_table_exits_three(self):
        error = ProgrammingError("INSERT", {}, Exception('relation "auth.users" does not exist'))
        with _patch_session(side_effect=error):
            result = runner.invoke(app, ["check", "--database-url", "postgresql://x@y/z", "--schema", "auth"])
        assert result.exit_code == 3

    def test_oserror_exits_three(self):
        with _patch_session(side_effect=ConnectionRefusedError("refused")):
            result = runner.invoke(app, ["check", "--database-url", "postgresql://x@y/z"])
        assert result.exit_code == 3


# ---------------------------------------------------------------------------
# scenarios
# ---------------------------------------------------------------------------


class TestScenariosCommand:
    def test_lists_scenarios(self):
        result = runner.invoke(app, ["scenarios"])
        assert result.exit_code == 0
        assert "valid_user" in result.output

    def test_json(self):
        result = runner.invoke(app, ["--json", "scenarios"])
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [r["name"] for r in rows] == [s.name for s in USERS_SCENARIOS]
        missing_city = next(r for r in rows if r["name"] == "missing_city")
        assert missing_city["expected"] == "REJECTED"
