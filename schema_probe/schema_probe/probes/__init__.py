"""Constraint probing: insert scenarios and rejection classification."""

from schema_probe.probes.constraint_probe import ConstraintProbe, ProbeOutcome, ProbeResult
from schema_probe.probes.rejection import ConstraintErrorKind, RejectionReason, classify_rejection
from schema_probe.probes.scenarios import (
    USERS_SCENARIOS,
    ConstraintScenario,
    ExpectedOutcome,
    OutcomeKind,
    ReadbackCheck,
    ReadbackKind,
    SqlFunction,
    boundary_length_scenarios,
    get_scenario,
    valid_user_row,
)

__all__ = [
    "ConstraintErrorKind",
    "ConstraintProbe",
    "ConstraintScenario",
    "ExpectedOutcome",
    "OutcomeKind",
    "ProbeOutcome",
    "ProbeResult",
    "ReadbackCheck",
    "ReadbackKind",
    "RejectionReason",
    "SqlFunction",
    "USERS_SCENARIOS",
    "boundary_length_scenarios",
    "classify_rejection",
    "get_scenario",
    "valid_user_row",
]
