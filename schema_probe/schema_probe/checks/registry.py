"""Check registry keyed by :class:`CheckType`."""

from __future__ import annotations

import logging

from schema_probe.checks.base import BaseCheck
from schema_probe.checks.models import CheckType

logger = logging.getLogger(__name__)

# Conformance runs before probes so a broken table shape shows up first.
_RUN_ORDER: dict[CheckType, int] = {
    CheckType.SCHEMA_CONFORMANCE: 0,
    CheckType.CONSTRAINT_PROBE: 1,
}


class CheckRegistry:
    """Registry for check implementations.

    Holds at most one check per :class:`CheckType`.
    """

    def __init__(self) -> None:
        self._checks: dict[CheckType, BaseCheck] = {}

    def register(self, check: BaseCheck) -> None:
        """Register a check implementation.

        Raises
        ------
        ValueError
            If a check with the same ``check_type`` is already registered.
        """
        if check.check_type in self._checks:
            raise ValueError(
                f"Check type {check.check_type.value} is already registered. "
                f"Each check type may be registered once."
            )
        self._checks[check.check_type] = check
        logger.debug("Registered check type: %s", check.check_type.value)

    def get_all(self) -> list[BaseCheck]:
        """Return all registered checks in run order."""
        return [self._checks[ct] for ct in self.get_types()]

    def get_types(self) -> list[CheckType]:
        return sorted(self._checks, key=lambda ct: _RUN_ORDER[ct])

