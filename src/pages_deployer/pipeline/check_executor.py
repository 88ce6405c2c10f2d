"""Check execution components for pipeline stages.

This module provides the CheckExecutor class responsible for executing individual
checks within pipeline stages. It handles timing, exception management,
and result enrichment with traceability information.
"""

import arrow
from loguru import logger

from .base import PipelineCheck
from .enums import CheckStatus
from .models import CheckResult


class CheckExecutor:
    """Handles individual check execution within pipeline stages.

    The CheckExecutor runs individual PipelineCheck instances, measures their
    execution time, converts expected exceptions into failed results and
    enriches each result with the stage name and a timestamp.
    """

    async def execute_single_check(self, check: PipelineCheck, stage_name: str) -> CheckResult:
        """Execute a single check and return its enriched result.

        Args:
            check: The PipelineCheck instance to execute.
            stage_name: Name of the stage executing this check.

        Returns:
            CheckResult: Enriched result containing execution status,
                timing, timestamp and stage name.

        Raises:
            No exceptions are raised for check errors - they are captured and
            converted to failed results with appropriate error details.
        """
        logger.debug("Running check: {}", check.name)
        check_start_time = arrow.utcnow().float_timestamp
        executed_at = arrow.utcnow().isoformat()

        try:
            check_result = await check.run()
            check_result.executed_at = executed_at
            check_result.execution_time_ms = (arrow.utcnow().float_timestamp - check_start_time) * 1000
            check_result.stage_name = stage_name
            return check_result

        except (ValueError, TypeError, RuntimeError, AttributeError, OSError) as e:
            return self._handle_check_exception(check, e, check_start_time, stage_name)

    def _handle_check_exception(
        self,
        check: PipelineCheck,
        e: Exception,
        check_start_time: float,
        stage_name: str,
    ) -> CheckResult:
        """Convert an exception raised by a check into a failed result."""
        error_result = CheckResult(
            status=CheckStatus.FAILED,
            message=f"Check execution failed: {e}",
            check_name=check.name,
            stage_name=stage_name,
            execution_time_ms=(arrow.utcnow().float_timestamp - check_start_time) * 1000,
            executed_at=arrow.utcnow().isoformat(),
            details={"exception": str(e), "type": type(e).__name__},
        )

        logger.error("Check {} threw exception: {}", check.name, e)
        return error_result
