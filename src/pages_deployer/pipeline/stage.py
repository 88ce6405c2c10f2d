"""Pipeline stage implementation for grouped checks.

A stage is a logical grouping of related checks (e.g. pre-build validation,
build output validation) executed as a unit with configurable fail-fast and
critical failure handling.

Typical Usage:
    stage = PipelineStage(
        name="pre-validation",
        description="Validates the project layout before building",
        is_critical=True,
        fail_fast=False,
    ).add_check(ManifestExistsCheck(project_root))

    result = await stage.execute()
    if result.status == CheckStatus.SUCCESS:
        print("Project layout is valid")
"""

import arrow
from loguru import logger

from .base import PipelineCheck
from .check_executor import CheckExecutor
from .enums import CheckStatus
from .models import StageResult
from .processor import ResultProcessor


class PipelineStage:
    """A pipeline stage containing logically related checks.

    Attributes:
        name: Unique identifier for this stage
        description: Human-readable description of stage purpose
        is_critical: Whether failure stops the entire pipeline
        fail_fast: Whether to stop on first check failure
        checks: List of PipelineCheck objects in this stage
    """

    def __init__(
        self,
        name: str,
        description: str,
        is_critical: bool = False,
        fail_fast: bool = True,
    ):
        """Initialize the stage.

        Args:
            name: Name of this stage (used for identification and logging)
            description: Description of what this stage does
            is_critical: If True, failure stops the entire pipeline
            fail_fast: If True, stop stage execution on first check failure
        """
        self.name = name
        self.description = description
        self.is_critical = is_critical
        self.fail_fast = fail_fast
        self.checks: list[PipelineCheck] = []

        self._check_executor = CheckExecutor()
        self._result_processor = ResultProcessor()

    def add_check(self, check: PipelineCheck) -> "PipelineStage":
        """Add a check to this stage (fluent interface)."""
        self.checks.append(check)
        return self

    def add_checks(self, checks: list[PipelineCheck]) -> "PipelineStage":
        """Add multiple checks to this stage (fluent interface)."""
        self.checks.extend(checks)
        return self

    async def execute(self) -> StageResult:
        """Execute all checks in this stage sequentially.

        Returns:
            StageResult: Result of executing this stage
        """
        logger.info("Executing pipeline stage: {}", self.name)
        start_time = arrow.utcnow().float_timestamp

        result = StageResult(
            stage_name=self.name,
            status=CheckStatus.RUNNING,
            message=f"Executing {self.name} stage",
            executed_at=arrow.utcnow().isoformat(),
            total_checks=len(self.checks),
        )

        for check in self.checks:
            should_stop = await self._execute_single_check(check, result)
            if should_stop:
                break

        self._result_processor.finalize_stage_result(result, self.name)

        result.execution_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000
        logger.info("Stage {} completed with status {} in {:.1f}ms", self.name, result.status, result.execution_time_ms)
        return result

    async def _execute_single_check(self, check: PipelineCheck, result: StageResult) -> bool:
        """Execute a single check and update the result.

        Returns:
            bool: True if stage execution should stop, False to continue
        """
        check_result = await self._check_executor.execute_single_check(check, self.name)
        result.check_results.append(check_result)

        should_stop, stop_reason = self._result_processor.process_check_result(check, check_result, self.name, self.fail_fast)

        if check_result.status == CheckStatus.SUCCESS:
            result.successful_checks += 1
        elif check_result.status == CheckStatus.WARNING:
            result.warning_checks += 1
        elif check_result.status == CheckStatus.NOT_APPLICABLE:
            result.skipped_checks += 1
        else:
            result.failed_checks += 1

        if should_stop and stop_reason:
            result.status = CheckStatus.FAILED
            result.message = stop_reason
            self._result_processor.mark_remaining_checks_skipped(result, check, self.checks, self.name, "due to fail-fast")

        return should_stop

    def __str__(self) -> str:
        return f"PipelineStage(name='{self.name}', checks={len(self.checks)})"

    def __repr__(self) -> str:
        return (
            f"PipelineStage(name='{self.name}', "
            f"description='{self.description}', "
            f"is_critical={self.is_critical}, fail_fast={self.fail_fast}, "
            f"checks={len(self.checks)})"
        )
