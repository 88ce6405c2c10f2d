"""Pipeline result calculation and finalization.

This module provides the ResultCalculator class responsible for aggregating
results from stage executions, calculating final statistics and determining
the overall pipeline status.

Status Determination Logic:
- No failed checks and no failed stage: SUCCESS
- Otherwise: FAILED

Typical Usage:
    calculator = ResultCalculator()
    final_result = calculator.finalize_result(pipeline_result, start_time)
"""

import arrow
from loguru import logger

from .enums import CheckStatus
from .models import PipelineResult


class ResultCalculator:
    """Handles result calculation and finalization for pipelines."""

    def finalize_result(self, result: PipelineResult, start_time: float) -> PipelineResult:
        """Calculate final statistics and determine overall status.

        Args:
            result: The PipelineResult to finalize. Should contain the completed
                stage_results from pipeline execution.
            start_time: Unix timestamp (float) when pipeline execution began.

        Returns:
            PipelineResult: The same result object, finalized with aggregated
                statistics, overall status and total execution time.
        """
        for stage_result in result.stage_results:
            result.total_checks += stage_result.total_checks
            result.successful_checks += stage_result.successful_checks + stage_result.warning_checks
            result.failed_checks += stage_result.failed_checks
            result.skipped_checks += stage_result.skipped_checks

        result.total_stages = len(result.stage_results)
        result.successful_stages = sum(1 for sr in result.stage_results if sr.status == CheckStatus.SUCCESS)
        result.failed_stages = sum(1 for sr in result.stage_results if sr.status == CheckStatus.FAILED)
        result.skipped_stages = sum(1 for sr in result.stage_results if sr.status == CheckStatus.SKIPPED)

        if result.overall_status == CheckStatus.RUNNING:
            if result.failed_checks == 0 and result.failed_stages == 0:
                result.overall_status = CheckStatus.SUCCESS
                result.message = "All pipeline stages completed successfully"
                logger.debug("Pipeline completed successfully")
            else:
                result.overall_status = CheckStatus.FAILED
                result.message = f"Pipeline completed with {result.failed_checks} check failures"
                logger.warning("Pipeline completed with {} failures", result.failed_checks)

        result.total_execution_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000
        return result
