"""Built-in check implementations."""

from schema_probe.checks.builtin.constraint_probes import ConstraintProbeCheck
from schema_probe.checks.builtin.schema_conformance import SchemaConformanceCheck

__all__ = ["ConstraintProbeCheck", "SchemaConformanceCheck"]
