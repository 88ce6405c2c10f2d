"""Base abstractions for pipeline checks."""

from abc import ABC, abstractmethod
from typing import Any

from .enums import CheckStatus
from .models import CheckResult


class PipelineCheck(ABC):
    """Abstract base class for individual pipeline checks."""

    def __init__(self, name: str, is_critical: bool = False):
        """Initialize the pipeline check.

        Args:
            name: The name of this check (used in result.check_name field)
            is_critical: If True, failure stops the current pipeline stage
        """
        self.name = name
        self.is_critical = is_critical

    @abstractmethod
    async def _execute(self) -> CheckResult:
        """Execute the check and return the result.

        This method should be implemented by subclasses.

        Returns:
            CheckResult: The result of the check
        """

    async def run(self) -> CheckResult:
        """Execute the check.

        Returns:
            CheckResult: The result of the check
        """
        return await self._execute()

    def _result(self, status: CheckStatus, message: str, details: dict[str, Any] | None) -> CheckResult:
        return CheckResult(
            check_name=self.name,
            status=status,
            message=message,
            details=details or {},
        )

    def success(self, message: str, details: dict[str, Any] | None = None) -> CheckResult:
        """Return a successful check result."""
        return self._result(CheckStatus.SUCCESS, message, details)

    def failed(self, message: str, details: dict[str, Any] | None = None) -> CheckResult:
        """Return a failed check result."""
        return self._result(CheckStatus.FAILED, message, details)

    def warning(self, message: str, details: dict[str, Any] | None = None) -> CheckResult:
        """Return a warning check result.

        Warnings do not fail the stage; their messages are surfaced to the
        caller alongside the stage result.
        """
        return self._result(CheckStatus.WARNING, message, details)

    def not_applicable(self, message: str, details: dict[str, Any] | None = None) -> CheckResult:
        """Return a not applicable check result.

        Use when a check should not run due to configuration (e.g. dry run),
        but this is expected behavior.
        """
        return self._result(CheckStatus.NOT_APPLICABLE, message, details)
