"""Pipeline execution orchestration.

This module provides the PipelineExecutor class responsible for running
pipeline stages in order, stopping on critical stage failures and recording
which stage failed.
"""

from loguru import logger

from .enums import CheckStatus
from .models import PipelineResult, StageResult
from .stage import PipelineStage


class PipelineExecutor:
    """Handles the execution logic for pipelines.

    Attributes:
        None (stateless executor - manages execution flow only)
    """

    async def execute_pipeline(self, stages: list[PipelineStage]) -> PipelineResult:
        """Execute the complete pipeline sequentially.

        The executor stops if a critical stage fails and marks the remaining
        stages as skipped.

        Args:
            stages: List of pipeline stages to execute in order

        Returns:
            PipelineResult: Pipeline execution result with stage results
        """
        logger.debug("Pipeline will execute {} stages", len(stages))

        result = PipelineResult(
            overall_status=CheckStatus.RUNNING,
            message="Pipeline execution in progress",
        )

        for stage in stages:
            stage_result = await stage.execute()
            result.stage_results.append(stage_result)

            if stage_result.status == CheckStatus.SUCCESS:
                logger.debug("Stage {} completed successfully", stage.name)
            elif stage_result.status == CheckStatus.SKIPPED:
                logger.info("Stage {} was skipped", stage.name)
            else:
                logger.warning("Stage {} failed", stage.name)
                if result.failed_stage is None:
                    result.failed_stage = stage.name

            if stage.is_critical and stage_result.status == CheckStatus.FAILED:
                result.overall_status = CheckStatus.FAILED
                result.message = f"Critical stage '{stage.name}' failed"
                logger.error("Critical stage {} failed, stopping", stage.name)
                self._mark_remaining_stages_skipped(result, stage, stages)
                break

        return result

    def _mark_remaining_stages_skipped(
        self,
        result: PipelineResult,
        failed_stage: PipelineStage,
        all_stages: list[PipelineStage],
    ) -> None:
        """Mark remaining stages as skipped after a critical stage failure."""
        try:
            failed_index = next(i for i, stage in enumerate(all_stages) if stage is failed_stage)
        except StopIteration:
            logger.warning("Could not find failed stage {}", failed_stage.name)
            return

        for stage in all_stages[failed_index + 1 :]:
            result.stage_results.append(
                StageResult(
                    stage_name=stage.name,
                    status=CheckStatus.SKIPPED,
                    message="Skipped due to critical stage failure",
                    total_checks=len(stage.checks),
                    skipped_checks=len(stage.checks),
                )
            )
            logger.info("Skipping stage {} due to critical failure", stage.name)
