"""Tests for pipeline execution and the pipeline builder."""

from unittest.mock import Mock, patch

import pytest

from pages_deployer.pipeline import CheckResult, CheckStatus, Pipeline, PipelineBuilder, PipelineCheck, PipelineStage


class MockPipelineCheck(PipelineCheck):
    """Mock check for testing."""

    def __init__(self, name: str, is_critical: bool = False, should_fail: bool = False):
        super().__init__(name, is_critical)
        self.should_fail = should_fail
        self.execute_called = False

    async def _execute(self) -> CheckResult:
        self.execute_called = True
        if self.should_fail:
            return self.failed(f"{self.name} failed")
        return self.success(f"{self.name} passed")


class TestPipeline:
    """Test Pipeline class."""

    @pytest.mark.asyncio
    async def test_empty_pipeline(self):
        result = await Pipeline([]).execute()

        assert result.overall_status == CheckStatus.SUCCESS
        assert result.total_stages == 0
        assert result.total_checks == 0

    @pytest.mark.asyncio
    async def test_successful_pipeline(self):
        check1 = MockPipelineCheck("check1")
        check2 = MockPipelineCheck("check2")
        pipeline = Pipeline(
            [
                PipelineStage("stage1", "Stage 1").add_check(check1),
                PipelineStage("stage2", "Stage 2").add_check(check2),
            ]
        )

        result = await pipeline.execute()

        assert result.overall_status == CheckStatus.SUCCESS
        assert result.total_stages == 2
        assert result.successful_stages == 2
        assert result.successful_checks == 2
        assert result.failed_stage is None
        assert [sr.status for sr in result.stage_results] == [CheckStatus.SUCCESS, CheckStatus.SUCCESS]

    @pytest.mark.asyncio
    async def test_non_critical_stage_failure_continues(self):
        later_check = MockPipelineCheck("later")
        pipeline = Pipeline(
            [
                PipelineStage("stage1", "Stage 1").add_check(MockPipelineCheck("failing", should_fail=True)),
                PipelineStage("stage2", "Stage 2").add_check(later_check),
            ]
        )

        result = await pipeline.execute()

        assert result.overall_status == CheckStatus.FAILED
        assert result.failed_stage == "stage1"
        assert result.successful_stages == 1
        assert later_check.execute_called

    @pytest.mark.asyncio
    async def test_critical_stage_failure_skips_remaining_stages(self):
        never_run = MockPipelineCheck("never_run")
        pipeline = Pipeline(
            [
                PipelineStage("stage1", "Stage 1").add_check(MockPipelineCheck("ok")),
                PipelineStage("stage2", "Stage 2", is_critical=True).add_check(MockPipelineCheck("failing", should_fail=True)),
                PipelineStage("stage3", "Stage 3").add_check(never_run),
            ]
        )

        result = await pipeline.execute()

        assert result.overall_status == CheckStatus.FAILED
        assert result.failed_stage == "stage2"
        assert result.message == "Critical stage 'stage2' failed"
        assert result.skipped_stages == 1
        assert result.stage_results[2].status == CheckStatus.SKIPPED
        assert not never_run.execute_called

    @pytest.mark.asyncio
    async def test_execute_single_stage(self):
        check = MockPipelineCheck("check")
        pipeline = Pipeline([PipelineStage("stage1", "Stage 1"), PipelineStage("stage2", "Stage 2").add_check(check)])

        stage_result = await pipeline.execute_stage("stage2")

        assert stage_result.status == CheckStatus.SUCCESS
        assert check.execute_called

    @pytest.mark.asyncio
    async def test_execute_unknown_stage_raises(self):
        with pytest.raises(ValueError, match="not found"):
            await Pipeline([]).execute_stage("missing")

    @pytest.mark.asyncio
    async def test_pipeline_execution_timing(self):
        # first reading is the pipeline start, every later one is half a second on
        timestamps = iter([0.0])

        def mock_arrow():
            timestamp = next(timestamps, 0.5)
            return Mock(float_timestamp=timestamp, isoformat=lambda: "2023-01-01T00:00:00+00:00")

        pipeline = Pipeline([PipelineStage("stage1", "Stage 1").add_check(MockPipelineCheck("check1"))])

        with patch("pages_deployer.pipeline.pipeline.arrow.utcnow", side_effect=mock_arrow):
            result = await pipeline.execute()

        assert result.total_execution_time_ms == pytest.approx(500.0)
        assert result.stage_results[0].executed_at == "2023-01-01T00:00:00+00:00"


class TestPipelineBuilder:
    """Test PipelineBuilder class."""

    @pytest.mark.asyncio
    async def test_build_pipeline(self):
        builder = PipelineBuilder()
        builder.add_stage("stage1", "Stage 1", is_critical=True).add_check(MockPipelineCheck("check1"))
        builder.add_stage("stage2", "Stage 2").add_check(MockPipelineCheck("check2"))

        pipeline = builder.build()
        result = await pipeline.execute()

        assert pipeline.get_stage_names() == ["stage1", "stage2"]
        assert pipeline.get_stage("stage1").is_critical is True
        assert result.total_checks == 2

    def test_duplicate_stage_rejected(self):
        builder = PipelineBuilder()
        builder.add_stage("stage1", "Stage 1")

        with pytest.raises(ValueError, match="already exists"):
            builder.add_stage("stage1", "Again")
