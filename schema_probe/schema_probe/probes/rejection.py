"""Classification of engine rejection messages.

The constraint probe asserts on the message text PostgreSQL returns when
it rejects a row.  This module is the only place that knows the wording
of those messages; the rest of the probe works with
:class:`ConstraintErrorKind` and the extracted subject (column, constraint
or type name).

The patterns match PostgreSQL's English server messages.  Other engines,
or servers running with a translated ``lc_messages``, word these
differently and would need their own patterns.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field


class ConstraintErrorKind(str, Enum):
    """Which constraint (or input rule) rejected a row."""

    NOT_NULL_VIOLATION = "NOT_NULL_VIOLATION"
    CHECK_VIOLATION = "CHECK_VIOLATION"
    UNIQUE_VIOLATION = "UNIQUE_VIOLATION"
    INVALID_INPUT_SYNTAX = "INVALID_INPUT_SYNTAX"
    VALUE_TOO_LONG = "VALUE_TOO_LONG"
    UNKNOWN = "UNKNOWN"


class RejectionReason(BaseModel):
    """Classified rejection: the kind plus what it names."""

    kind: ConstraintErrorKind
    subject: str | None = Field(
        default=None,
        description="Column, constraint or type named by the message.",
    )
    message: str = Field(default="", description="The raw engine message, unchanged.")

    @property
    def matchable(self) -> str:
        """Stable substring identifying this rejection in the raw message."""
        return _MATCHABLE[self.kind](self.subject) if self.subject else self.message


# Ordered: the first matching pattern wins.
_PATTERNS: list[tuple[ConstraintErrorKind, re.Pattern[str]]] = [
    (
        ConstraintErrorKind.NOT_NULL_VIOLATION,
        re.compile(r'null value in column "(?P<subject>[^"]+)"'),
    ),
    (
        ConstraintErrorKind.CHECK_VIOLATION,
        re.compile(r'violates check constraint "(?P<subject>[^"]+)"'),
    ),
    (
        ConstraintErrorKind.UNIQUE_VIOLATION,
        re.compile(r'duplicate key value violates unique constraint "(?P<subject>[^"]+)"'),
    ),
    (
        ConstraintErrorKind.INVALID_INPUT_SYNTAX,
        re.compile(r"invalid input syntax for type (?P<subject>[a-z][a-z ]*[a-z])"),
    ),
    (
        ConstraintErrorKind.VALUE_TOO_LONG,
        re.compile(r"value too long for type (?P<subject>[a-z ]+\(\d+\))"),
    ),
]

_MATCHABLE = {
    ConstraintErrorKind.NOT_NULL_VIOLATION: lambda s: f'null value in column "{s}"',
    ConstraintErrorKind.CHECK_VIOLATION: lambda s: s,
    ConstraintErrorKind.UNIQUE_VIOLATION: lambda s: s,
    ConstraintErrorKind.INVALID_INPUT_SYNTAX: lambda s: f"invalid input syntax for type {s}",
    ConstraintErrorKind.VALUE_TOO_LONG: lambda s: f"value too long for type {s}",
    ConstraintErrorKind.UNKNOWN: lambda s: s,
}


def classify_rejection(message: str) -> RejectionReason:
    """Map a raw engine message to a :class:`RejectionReason`.

    Messages that match none of the known patterns are classified as
    ``UNKNOWN`` with no subject; the raw message is always preserved.
    """
    for kind, pattern in _PATTERNS:
        match = pattern.search(message)
        if match:
            return RejectionReason(kind=kind, subject=match.group("subject"), message=message)
    return RejectionReason(kind=ConstraintErrorKind.UNKNOWN, message=message)
