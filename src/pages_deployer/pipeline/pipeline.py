"""Main pipeline implementation for orchestrating stages.

The Pipeline is the primary interface for executing checks in a structured,
stage-based approach. It coordinates the executor (stage ordering and critical
failures) and the calculator (final statistics).

Typical Usage:
    pipeline = Pipeline([pre_validation, cleanup, build, validation])

    result = await pipeline.execute()
    if result.overall_status == CheckStatus.SUCCESS:
        print("Build is ready to deploy")
    else:
        print(f"Failed at stage {result.failed_stage}")
"""

import arrow
from loguru import logger

from .calculator import ResultCalculator
from .executor import PipelineExecutor
from .models import PipelineResult, StageResult
from .stage import PipelineStage


class Pipeline:
    """Pipeline that orchestrates execution of check stages in sequence.

    Attributes:
        stages: List of PipelineStage objects to execute in order
    """

    def __init__(self, stages: list[PipelineStage]):
        self.stages = stages

        self._executor = PipelineExecutor()
        self._calculator = ResultCalculator()

    async def execute(self) -> PipelineResult:
        """Execute the complete pipeline and return finalized results."""
        logger.debug("Starting pipeline execution")
        start_time = arrow.utcnow().float_timestamp

        result = await self._executor.execute_pipeline(self.stages)
        result = self._calculator.finalize_result(result, start_time)

        logger.debug("Pipeline completed with status {}", result.overall_status)
        return result

    async def execute_stage(self, stage_name: str) -> StageResult:
        """Execute a single stage by name, outside of the full pipeline run.

        Raises:
            ValueError: If no stage has that name
        """
        stage = self.get_stage(stage_name)
        if stage is None:
            raise ValueError(f"Stage '{stage_name}' not found")
        return await stage.execute()

    def get_stage_names(self) -> list[str]:
        """Get names of all stages in this pipeline."""
        return [stage.name for stage in self.stages]

    def get_stage(self, stage_name: str) -> PipelineStage | None:
        """Get a stage by name."""
        return next((stage for stage in self.stages if stage.name == stage_name), None)

    def __str__(self) -> str:
        return f"Pipeline(stages={len(self.stages)})"

    def __repr__(self) -> str:
        return f"Pipeline(stages={self.get_stage_names()})"
