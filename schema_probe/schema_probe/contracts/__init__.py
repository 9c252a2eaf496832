"""Schema conformance checking.

Compares the declared field list of a table against a live catalog
snapshot and reports one failure per field and aspect.
"""

from schema_probe.contracts.conformance import (
    ConformanceChecker,
    ConformanceError,
    ConformanceReport,
    ConformanceViolation,
    DefaultMismatchError,
    LengthMismatchError,
    MissingFieldError,
    NullabilityMismatchError,
    TypeMismatchError,
    ViolationType,
)

__all__ = [
    "ConformanceChecker",
    "ConformanceError",
    "ConformanceReport",
    "ConformanceViolation",
    "DefaultMismatchError",
    "LengthMismatchError",
    "MissingFieldError",
    "NullabilityMismatchError",
    "TypeMismatchError",
    "ViolationType",
]
