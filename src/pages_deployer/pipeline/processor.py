"""Result processing and decision logic for pipeline stages.

This module provides the ResultProcessor class responsible for processing
check results and making execution flow decisions: fail-fast behavior,
critical check failures and stage skipping.
"""

from loguru import logger

from .base import PipelineCheck
from .enums import CheckStatus
from .models import CheckResult, StageResult


class ResultProcessor:
    """Handles result processing and decision logic for pipeline stages."""

    def process_check_result(
        self,
        check: PipelineCheck,
        check_result: CheckResult,
        stage_name: str,
        fail_fast: bool = False,
    ) -> tuple[bool, str]:
        """Process a check result and determine if the stage should stop.

        Args:
            check: The check that was executed
            check_result: The result from the check execution
            stage_name: Name of the stage for logging purposes
            fail_fast: Whether the stage should stop on first failure

        Returns:
            tuple: (should_stop, stop_reason)
                - should_stop: True if stage execution should stop
                - stop_reason: Human-readable reason for stopping (empty if not stopping)
        """
        if check_result.status == CheckStatus.SUCCESS:
            logger.debug("Check {} passed", check.name)
            return False, ""
        elif check_result.status == CheckStatus.WARNING:
            logger.warning("Check {} passed with warning: {}", check.name, check_result.message)
            return False, ""
        elif check_result.status == CheckStatus.NOT_APPLICABLE:
            logger.info("Check {} not applicable: {}", check.name, check_result.message)
            return False, ""
        else:
            logger.warning("Check {} failed: {}", check.name, check_result.message)
            return self._should_stop_on_failure(check, stage_name, fail_fast)

    def _should_stop_on_failure(self, check: PipelineCheck, stage_name: str, fail_fast: bool = False) -> tuple[bool, str]:
        if check.is_critical:
            logger.error("Critical check {} failed, stopping stage", check.name)
            return True, f"Critical check '{check.name}' failed in stage '{stage_name}'"

        if fail_fast:
            logger.warning("Stage failing fast due to {}", check.name)
            return True, f"Stage '{stage_name}' failed on check '{check.name}'"

        return False, ""

    def finalize_stage_result(self, result: StageResult, stage_name: str) -> None:
        """Set final stage status if still running.

        Args:
            result: The stage result to finalize
            stage_name: Name of the stage
        """
        if result.status != CheckStatus.RUNNING:
            return

        if result.failed_checks == 0:
            result.status = CheckStatus.SUCCESS
            passed = result.successful_checks + result.warning_checks
            result.message = f"Stage '{stage_name}' completed successfully: {passed}/{result.total_checks} checks passed"
            if result.warning_checks:
                result.message += f" ({result.warning_checks} with warnings)"
        else:
            result.status = CheckStatus.FAILED
            result.message = f"Stage '{stage_name}' completed with failures: {result.failed_checks}/{result.total_checks} checks failed"

    def mark_remaining_checks_skipped(
        self,
        result: StageResult,
        stopped_at: PipelineCheck,
        all_checks: list[PipelineCheck],
        stage_name: str,
        reason: str = "due to previous failure in stage",
    ) -> None:
        """Mark the checks after ``stopped_at`` as skipped.

        Args:
            result: The stage result to update
            stopped_at: The check that caused the stage to stop
            all_checks: All checks in the stage
            stage_name: Name of the stage
            reason: The reason why checks are being skipped
        """
        try:
            stopped_index = next(i for i, check in enumerate(all_checks) if check is stopped_at)
        except StopIteration:
            logger.warning("Could not find check {}", stopped_at.name)
            return

        for check in all_checks[stopped_index + 1 :]:
            result.check_results.append(
                CheckResult(
                    status=CheckStatus.SKIPPED,
                    message=f"Skipped {reason}",
                    check_name=check.name,
                    stage_name=stage_name,
                )
            )
            result.skipped_checks += 1
            logger.debug("Skipping check {} {}", check.name, reason)
