"""Tests for schema_probe.contracts.conformance."""

from __future__ import annotations

import pytest

from schema_probe.contracts.conformance import (
    ConformanceChecker,
    DefaultMismatchError,
    LengthMismatchError,
    MissingFieldError,
    NullabilityMismatchError,
    TypeMismatchError,
    ViolationType,
)
from schema_probe.introspection.schema_introspector import build_actual_schema
from schema_probe.models.schema_definition import USERS_SCHEMA, FieldSpec, SchemaDefinition


def _checker(rows: list[dict], definition: SchemaDefinition = USERS_SCHEMA) -> ConformanceChecker:
    return ConformanceChecker(definition, build_actual_schema(definition.table_name, rows))


def _replace(rows: list[dict], name: str, **changes) -> list[dict]:
    return [dict(row, **changes) if row["column_name"] == name else row for row in rows]


class TestCheckFieldPresent:
    def test_present(self, make_catalog) -> None:
        _checker(make_catalog()).check_field_present("email")

    def test_missing(self, make_catalog) -> None:
        rows = [r for r in make_catalog() if r["column_name"] != "city"]
        with pytest.raises(MissingFieldError) as exc_info:
            _checker(rows).check_field_present("city")
        assert exc_info.value.name == "city"


class TestCheckFieldType:
    @pytest.mark.parametrize("spec", USERS_SCHEMA.fields(), ids=lambda s: s.name)
    def test_every_field_matches(self, make_catalog, spec: FieldSpec) -> None:
        _checker(make_catalog()).check_field_type(spec)

    def test_mismatch_reports_both_types(self, make_catalog) -> None:
        rows = _replace(make_catalog(), "birthdate", data_type="timestamp without time zone")
        with pytest.raises(TypeMismatchError) as exc_info:
            _checker(rows).check_field_type(USERS_SCHEMA.field("birthdate"))
        err = exc_info.value
        assert err.expected == "date"
        assert err.actual == "timestamp without time zone"

    def test_comparison_is_exact(self, make_catalog) -> None:
        rows = _replace(make_catalog(), "email", data_type="varchar")
        with pytest.raises(TypeMismatchError):
            _checker(rows).check_field_type(USERS_SCHEMA.field("email"))

    def test_missing_field_raises_missing(self, make_catalog) -> None:
        rows = [r for r in make_catalog() if r["column_name"] != "enabled"]
        with pytest.raises(MissingFieldError):
            _checker(rows).check_field_type(USERS_SCHEMA.field("enabled"))


class TestCheckFieldConstraints:
    def test_no_errors_on_match(self, make_catalog) -> None:
        checker = _checker(make_catalog())
        for spec in USERS_SCHEMA.fields():
            assert checker.check_field_constraints(spec) == []

    def test_nullability(self, make_catalog) -> None:
        rows = _replace(make_catalog(), "city", is_nullable="YES")
        errors = _checker(rows).check_field_constraints(USERS_SCHEMA.field("city"))
        assert len(errors) == 1
        assert isinstance(errors[0], NullabilityMismatchError)
        assert errors[0].expected == "NOT NULL"

    def test_length(self, make_catalog) -> None:
        rows = _replace(make_catalog(), "first_name", character_maximum_length=100)
        errors = _checker(rows).check_field_constraints(USERS_SCHEMA.field("first_name"))
        assert [type(e) for e in errors] == [LengthMismatchError]
        assert errors[0].actual == "100"

    def test_default(self, make_catalog) -> None:
        rows = _replace(make_catalog(), "enabled", column_default=None)
        errors = _checker(rows).check_field_constraints(USERS_SCHEMA.field("enabled"))
        assert [type(e) for e in errors] == [DefaultMismatchError]

    def test_undeclared_aspects_are_skipped(self, make_catalog) -> None:
        rows = _replace(make_catalog(), "username", is_nullable="YES", character_maximum_length=9999)
        assert _checker(rows).check_field_constraints(USERS_SCHEMA.field("username")) == []


class TestCheckAll:
    def test_passes_on_matching_table(self, make_catalog) -> None:
        report = _checker(make_catalog()).check_all()
        assert report.passed
        assert report.fields_checked == len(USERS_SCHEMA.fields())

    def test_reports_every_failing_field(self, make_catalog) -> None:
        rows = [r for r in make_catalog() if r["column_name"] not in ("updated_at", "password")]
        rows = _replace(rows, "birthdate", data_type="text")
        report = _checker(rows).check_all()

        assert not report.passed
        by_column = {v.column_name: v.violation_type for v in report.violations}
        assert by_column == {
            "birthdate": ViolationType.TYPE_MISMATCH,
            "updated_at": ViolationType.MISSING_FIELD,
            "password": ViolationType.MISSING_FIELD,
        }

    def test_missing_field_reported_once(self, make_catalog) -> None:
        rows = [r for r in make_catalog() if r["column_name"] != "first_name"]
        report = _checker(rows).check_all()
        assert len(report.violations_for("first_name")) == 1

    def test_base_table_against_full_schema(self, make_catalog) -> None:
        from schema_probe.models.schema_definition import USERS_BASE_SCHEMA

        report = _checker(make_catalog(USERS_BASE_SCHEMA)).check_all()
        missing = [v.column_name for v in report.violations]
        assert missing == ["updated_at", "first_name", "last_name", "password", "enabled", "last_access_time"]

    def test_extra_live_columns_are_ignored(self, make_catalog) -> None:
        rows = make_catalog() + [
            {
                "column_name": "nickname",
                "data_type": "text",
                "is_nullable": "YES",
                "column_default": None,
                "character_maximum_length": None,
            }
        ]
        assert _checker(rows).check_all().passed
