"""Pipeline builder for constructing pipelines."""

from .pipeline import Pipeline
from .stage import PipelineStage


class PipelineBuilder:
    """Builder for constructing pipelines with fluent interface."""

    def __init__(self):
        self.stages: list[PipelineStage] = []
        self._stages_by_name: dict[str, PipelineStage] = {}

    def add_stage(
        self,
        name: str,
        description: str,
        is_critical: bool = False,
        fail_fast: bool = True,
    ) -> PipelineStage:
        """Add a new pipeline stage and return it for chaining.

        Args:
            name: Stage name
            description: Stage description
            is_critical: If True, failure stops entire pipeline
            fail_fast: If True, stop stage on first check failure

        Returns:
            The created stage for method chaining

        Raises:
            ValueError: If stage name already exists
        """
        if name in self._stages_by_name:
            raise ValueError(f"Stage '{name}' already exists")

        stage = PipelineStage(name, description, is_critical, fail_fast)
        self.stages.append(stage)
        self._stages_by_name[name] = stage
        return stage

    def get_stage(self, name: str) -> PipelineStage | None:
        """Get an existing stage by name."""
        return self._stages_by_name.get(name)

    def build(self) -> Pipeline:
        """Build the final pipeline."""
        return Pipeline(self.stages)

    def __str__(self) -> str:
        return f"PipelineBuilder(stages={len(self.stages)})"
