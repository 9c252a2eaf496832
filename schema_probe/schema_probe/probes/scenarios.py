"""Constraint scenarios for the ``users`` table.

A scenario is one insert attempt plus the outcome it must produce.  The
scenarios form a flat, table-driven list: each one is self-contained and
can run in any order, because the probe truncates the table after every
attempt.

Column values are plain Python values.  The probe sends each one to the
server as a text literal and lets the server cast it to the column type,
so a value like ``"invalid_date"`` reaches PostgreSQL's own date parser.
:data:`SqlFunction.NOW` is emitted verbatim as ``now()``.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from schema_probe.probes.rejection import ConstraintErrorKind


class SqlFunction(str, Enum):
    """Server-side expressions a scenario may use instead of a literal."""

    NOW = "now()"


class OutcomeKind(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ExpectedOutcome(BaseModel):
    """What an insert attempt must produce."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    reason: str | None = Field(
        default=None,
        description="Substring the rejection message must contain.",
    )
    error_kind: ConstraintErrorKind | None = Field(
        default=None,
        description="When set, the classified rejection kind must match.",
    )
    rows_affected: int = Field(default=1, description="Row count an accepted insert must report.")

    @classmethod
    def accepted(cls) -> ExpectedOutcome:
        return cls(kind=OutcomeKind.ACCEPTED)

    @classmethod
    def rejected(cls, reason: str, kind: ConstraintErrorKind | None = None) -> ExpectedOutcome:
        return cls(kind=OutcomeKind.REJECTED, reason=reason, error_kind=kind, rows_affected=0)


class ReadbackKind(str, Enum):
    """Assertion applied to a column of the row read back after insert."""

    EQUALS = "EQUALS"
    NOT_NULL = "NOT_NULL"
    CURRENT_YEAR = "CURRENT_YEAR"


class ReadbackCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    kind: ReadbackKind
    value: Any = None


class ConstraintScenario(BaseModel):
    """One insert attempt and the outcome it must produce."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique, stable scenario identifier.")
    description: str = Field(default="", description="Human-readable summary.")
    column_values: dict[str, Any] = Field(
        default_factory=dict,
        description="Column to value; omitted columns are left to their defaults.",
    )
    expected: ExpectedOutcome
    readback_checks: tuple[ReadbackCheck, ...] = Field(default_factory=tuple)

    @property
    def key_email(self) -> str | None:
        """Primary-key value used to read the inserted row back."""
        value = self.column_values.get("email")
        return value if isinstance(value, str) else None


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


def valid_user_row(
    suffix: str = "",
    *,
    omit: tuple[str, ...] = (),
    **overrides: Any,
) -> dict[str, Any]:
    """Build a fully valid ``users`` row.

    *suffix* keeps email and username distinct between scenarios.  Columns
    in *omit* are dropped so the server default (or NOT NULL rule) applies;
    *overrides* replace individual values.
    """
    row: dict[str, Any] = {
        "email": f"user{suffix}@example.com",
        "username": f"user{suffix}",
        "birthdate": date(2024, 1, 2),
        "city": "La Plata",
        "first_name": "Juan",
        "last_name": "Perez",
        "password": "miPassword123",
        "enabled": True,
        "updated_at": SqlFunction.NOW,
        "last_access_time": SqlFunction.NOW,
    }
    row.update(overrides)
    for column in omit:
        row.pop(column, None)
    return row


def boundary_length_scenarios(
    column: str,
    max_length: int,
    *,
    fill: str = "x",
    suffix: str = "",
) -> list[ConstraintScenario]:
    """Return the 1 / max / max+1 length scenarios for a bounded text column."""
    too_long = f"value too long for type character varying({max_length})"
    return [
        ConstraintScenario(
            name=f"{column}_length_1",
            description=f"{column} of length 1 (minimum valid)",
            column_values=valid_user_row(f"{suffix}a", **{column: fill}),
            expected=ExpectedOutcome.accepted(),
        ),
        ConstraintScenario(
            name=f"{column}_length_{max_length}",
            description=f"{column} of length {max_length} (max valid)",
            column_values=valid_user_row(f"{suffix}b", **{column: fill * max_length}),
            expected=ExpectedOutcome.accepted(),
        ),
        ConstraintScenario(
            name=f"{column}_length_{max_length + 1}",
            description=f"{column} of length {max_length + 1} (one over the limit)",
            column_values=valid_user_row(f"{suffix}c", **{column: fill * (max_length + 1)}),
            expected=ExpectedOutcome.rejected(too_long, ConstraintErrorKind.VALUE_TOO_LONG),
        ),
    ]


# ---------------------------------------------------------------------------
# users
# ---------------------------------------------------------------------------

USERS_SCENARIOS: tuple[ConstraintScenario, ...] = (
    ConstraintScenario(
        name="valid_user",
        description="Insert a valid user",
        column_values=valid_user_row(),
        expected=ExpectedOutcome.accepted(),
        readback_checks=(
            ReadbackCheck(column="email", kind=ReadbackKind.EQUALS, value="user@example.com"),
            ReadbackCheck(column="created_at", kind=ReadbackKind.CURRENT_YEAR),
        ),
    ),
    ConstraintScenario(
        name="invalid_email",
        description="Insert a user with an invalid email",
        column_values=valid_user_row("2", email="user"),
        expected=ExpectedOutcome.rejected("users_email_check", ConstraintErrorKind.CHECK_VIOLATION),
    ),
    ConstraintScenario(
        name="invalid_birthdate",
        description="Insert a user with an invalid birthdate",
        column_values=valid_user_row("3", birthdate="invalid_date"),
        expected=ExpectedOutcome.rejected(
            "invalid input syntax for type date",
            ConstraintErrorKind.INVALID_INPUT_SYNTAX,
        ),
    ),
    ConstraintScenario(
        name="missing_city",
        description="Insert a user without city",
        column_values=valid_user_row("4", omit=("city",)),
        expected=ExpectedOutcome.rejected(
            'null value in column "city"',
            ConstraintErrorKind.NOT_NULL_VIOLATION,
        ),
    ),
    ConstraintScenario(
        name="short_username",
        description="Insert a user whose username is not longer than 3 characters",
        column_values=valid_user_row("5", username="usr"),
        expected=ExpectedOutcome.rejected("users_username_check", ConstraintErrorKind.CHECK_VIOLATION),
    ),
    ConstraintScenario(
        name="default_updated_at",
        description="Insert a user without updated_at (should use default now())",
        column_values=valid_user_row("11", omit=("updated_at",)),
        expected=ExpectedOutcome.accepted(),
        readback_checks=(ReadbackCheck(column="updated_at", kind=ReadbackKind.NOT_NULL),),
    ),
    ConstraintScenario(
        name="null_updated_at",
        description="Insert a user with null updated_at should fail",
        column_values=valid_user_row("12", updated_at=None),
        expected=ExpectedOutcome.rejected(
            'null value in column "updated_at"',
            ConstraintErrorKind.NOT_NULL_VIOLATION,
        ),
    ),
    *boundary_length_scenarios("first_name", 50, fill="J", suffix="13"),
    *boundary_length_scenarios("last_name", 50, fill="P", suffix="15"),
    *boundary_length_scenarios("password", 255, fill="p", suffix="17"),
    ConstraintScenario(
        name="default_enabled",
        description="Insert a user without enabled (should default to true)",
        column_values=valid_user_row("19", omit=("enabled",)),
        expected=ExpectedOutcome.accepted(),
        readback_checks=(ReadbackCheck(column="enabled", kind=ReadbackKind.EQUALS, value=True),),
    ),
    ConstraintScenario(
        name="disabled_user",
        description="Insert a user with enabled = false",
        column_values=valid_user_row("20", enabled=False),
        expected=ExpectedOutcome.accepted(),
        readback_checks=(ReadbackCheck(column="enabled", kind=ReadbackKind.EQUALS, value=False),),
    ),
    ConstraintScenario(
        name="null_last_access_time",
        description="Insert a user with null last_access_time",
        column_values=valid_user_row("21", last_access_time=None),
        expected=ExpectedOutcome.accepted(),
    ),
)


def get_scenario(name: str) -> ConstraintScenario:
    """Look up a scenario in :data:`USERS_SCENARIOS` by name.

    Raises
    ------
    KeyError
        If no scenario has that name.
    """
    for scenario in USERS_SCENARIOS:
        if scenario.name == name:
            return scenario
    raise KeyError(f"Unknown scenario: {name}")
