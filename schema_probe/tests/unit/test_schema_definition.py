"""Tests for schema_probe.models.schema_definition."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from schema_probe.models.schema_definition import (
    ADDED_FIELDS,
    BASE_FIELDS,
    BOOLEAN,
    TIMESTAMPTZ,
    USERS_BASE_SCHEMA,
    USERS_SCHEMA,
    VARCHAR,
    FieldSpec,
    SchemaDefinition,
)


class TestUsersSchema:
    def test_field_order(self) -> None:
        assert USERS_SCHEMA.names() == [
            "email",
            "username",
            "created_at",
            "birthdate",
            "city",
            "updated_at",
            "first_name",
            "last_name",
            "password",
            "enabled",
            "last_access_time",
        ]

    def test_base_schema_has_only_base_fields(self) -> None:
        assert USERS_BASE_SCHEMA.fields() == BASE_FIELDS
        assert len(USERS_BASE_SCHEMA.fields()) == 5

    def test_added_fields_types(self) -> None:
        types = {spec.name: spec.type for spec in ADDED_FIELDS}
        assert types == {
            "updated_at": TIMESTAMPTZ,
            "first_name": VARCHAR,
            "last_name": VARCHAR,
            "password": VARCHAR,
            "enabled": BOOLEAN,
            "last_access_time": TIMESTAMPTZ,
        }

    def test_type_strings_are_catalog_spelling(self) -> None:
        assert VARCHAR == "character varying"
        assert TIMESTAMPTZ == "timestamp with time zone"

    def test_names_are_unique(self) -> None:
        names = USERS_SCHEMA.names()
        assert len(names) == len(set(names))

    def test_bounded_text_fields(self) -> None:
        bounded = {spec.name: spec.max_length for spec in USERS_SCHEMA.bounded_text_fields()}
        assert bounded == {"first_name": 50, "last_name": 50, "password": 255}

    def test_last_access_time_is_nullable_without_default(self) -> None:
        spec = USERS_SCHEMA.field("last_access_time")
        assert spec is not None
        assert spec.nullable is True
        assert spec.has_default is False


class TestSchemaDefinition:
    def test_field_lookup(self) -> None:
        spec = USERS_SCHEMA.field("city")
        assert spec == FieldSpec(name="city", type=VARCHAR, nullable=False)

    def test_field_lookup_unknown(self) -> None:
        assert USERS_SCHEMA.field("nickname") is None

    def test_empty_definition(self) -> None:
        definition = SchemaDefinition(table_name="empty")
        assert definition.fields() == ()
        assert definition.names() == []

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            USERS_SCHEMA.table_name = "accounts"  # type: ignore[misc]

    def test_field_spec_optional_aspects_default_to_none(self) -> None:
        spec = FieldSpec(name="x", type="date")
        assert spec.nullable is None
        assert spec.max_length is None
        assert spec.has_default is None
