"""Abstract base class for check implementations."""

from __future__ import annotations

import abc

from schema_probe.checks.models import CheckContext, CheckResult, CheckType


class BaseCheck(abc.ABC):
    """Abstract base for all check implementations.

    Subclasses must implement :attr:`check_type` and :meth:`execute`.
    Checks hold no session state; everything they need arrives in the
    :class:`CheckContext`.
    """

    @property
    @abc.abstractmethod
    def check_type(self) -> CheckType:
        """The category of check this implementation provides."""

    @abc.abstractmethod
    async def execute(self, context: CheckContext) -> list[CheckResult]:
        """Run the check and return one result per target and aspect."""
