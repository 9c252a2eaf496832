"""Expected schema for the ``users`` table.

Each :class:`FieldSpec` names a column and the data-type string the
PostgreSQL catalog reports for it (``information_schema.columns.data_type``).
Types are compared verbatim against the live catalog, so they must be
spelled exactly as PostgreSQL spells them (``character varying``, not
``varchar``).

Nullability, maximum length and default presence are optional
expectations.  ``None`` means "not declared" and the conformance checker
skips that aspect for the field.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FieldSpec(BaseModel):
    """Expected shape of a single column."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Column name as stored in the catalog.")
    type: str = Field(..., description="Catalog-reported data type, e.g. 'character varying'.")
    nullable: bool | None = Field(
        default=None,
        description="Expected nullability. None skips the nullability check.",
    )
    max_length: int | None = Field(
        default=None,
        description="Declared character length for bounded text columns.",
    )
    has_default: bool | None = Field(
        default=None,
        description="Whether the column is expected to carry a server default.",
    )


class SchemaDefinition(BaseModel):
    """Authoritative list of expected fields for one table."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    field_specs: tuple[FieldSpec, ...] = Field(default_factory=tuple)

    def fields(self) -> tuple[FieldSpec, ...]:
        """Return the expected fields in declaration order."""
        return self.field_specs

    def names(self) -> list[str]:
        return [spec.name for spec in self.field_specs]

    def field(self, name: str) -> FieldSpec | None:
        """Look up a field by name, or ``None`` when it is not declared."""
        for spec in self.field_specs:
            if spec.name == name:
                return spec
        return None

    def bounded_text_fields(self) -> list[FieldSpec]:
        """Return text fields that declare a maximum length."""
        return [spec for spec in self.field_specs if spec.max_length is not None]


# ---------------------------------------------------------------------------
# users
# ---------------------------------------------------------------------------

VARCHAR = "character varying"
TIMESTAMPTZ = "timestamp with time zone"
DATE = "date"
BOOLEAN = "boolean"

# Columns present before the add-user-fields migration.
BASE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="email", type=VARCHAR, nullable=False),
    FieldSpec(name="username", type=VARCHAR),
    FieldSpec(name="created_at", type=TIMESTAMPTZ, has_default=True),
    FieldSpec(name="birthdate", type=DATE),
    FieldSpec(name="city", type=VARCHAR, nullable=False),
)

# Columns added by the add-user-fields migration.
ADDED_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="updated_at", type=TIMESTAMPTZ, nullable=False, has_default=True),
    FieldSpec(name="first_name", type=VARCHAR, nullable=False, max_length=50),
    FieldSpec(name="last_name", type=VARCHAR, nullable=False, max_length=50),
    FieldSpec(name="password", type=VARCHAR, nullable=False, max_length=255),
    FieldSpec(name="enabled", type=BOOLEAN, nullable=False, has_default=True),
    FieldSpec(name="last_access_time", type=TIMESTAMPTZ, nullable=True, has_default=False),
)

USERS_BASE_SCHEMA = SchemaDefinition(table_name="users", field_specs=BASE_FIELDS)
USERS_SCHEMA = SchemaDefinition(table_name="users", field_specs=BASE_FIELDS + ADDED_FIELDS)
