"""Build orchestration for one environment.

The orchestrator produces a validated static build in four stages:
pre-validation, cleanup, build and output validation. Each stage is a
critical stage of a ``Pipeline``; the first failing stage stops the run and
is recorded on the result, so a deployment is never attempted against stale
or partially written output.

Typical Usage:
    orchestrator = BuildOrchestrator(Environment.STAGING)
    result = await orchestrator.orchestrate_build()
    if not result.success:
        print(f"Build failed at {result.stage}: {result.errors}")
"""

from loguru import logger

from pages_deployer.constants import STAGE_PLATFORM_VALIDATION
from pages_deployer.environments import ConfigValidationResult, Environment, get_deployment_config
from pages_deployer.error_handling import DeploymentErrorHandler
from pages_deployer.exceptions import DeploymentError, ErrorKind
from pages_deployer.pipeline import CheckStatus, Pipeline, PipelineBuilder, StageResult
from pages_deployer.process import CommandRunner
from pages_deployer.settings import Settings, get_settings

from .assets import BuildAssets, format_file_size
from .models import BuildExecutionResult, BuildOrchestrationResult, BuildStage, BuildValidationResult
from .pipeline_builders import (
    add_build_stage,
    add_cleanup_stage,
    add_platform_validation_stage,
    add_pre_validation_stage,
    add_validation_stage,
)


class BuildOrchestrator:
    """Runs and validates the static-site build of one environment.

    Attributes:
        environment: Environment being built
        errors: Problems found by the operations run so far
        warnings: Non-fatal findings of the operations run so far
    """

    def __init__(
        self,
        environment: Environment | str,
        settings: Settings | None = None,
        runner: CommandRunner | None = None,
        error_handler: DeploymentErrorHandler | None = None,
        dry_run: bool = False,
        verbose: bool = False,
    ):
        self.settings = settings or get_settings()
        self.deployment_config = get_deployment_config(environment)
        self.environment = self.deployment_config.environment
        self.runner = runner or CommandRunner(cwd=self.settings.project_root, timeout_s=self.settings.command_timeout_s)
        self.error_handler = error_handler or DeploymentErrorHandler(
            environment=self.environment,
            package_manager=self.settings.package_manager,
            platform_cli=self.settings.platform_cli,
        )
        self.dry_run = dry_run
        self.verbose = verbose

        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.pipeline = self._build_pipeline()

    def _build_pipeline(self) -> Pipeline:
        project_root = self.settings.project_root
        output_path = self.settings.output_path

        builder = PipelineBuilder()
        add_pre_validation_stage(builder, project_root, self.deployment_config.build_script)
        add_cleanup_stage(builder, output_path, dry_run=self.dry_run)
        add_build_stage(
            builder,
            self.deployment_config.build_command(self.settings.package_manager),
            self.runner,
            timeout_s=self.settings.command_timeout_s,
            dry_run=self.dry_run,
        )
        add_validation_stage(builder, output_path, self.environment, dry_run=self.dry_run)
        return builder.build()

    async def validate_platform(self) -> ConfigValidationResult:
        """Check that the platform CLI is installed and logged in, and that the
        platform project file is ready for this environment.

        Read-only, so it also runs in a dry run. Never raises.
        """
        logger.info("Validating edge platform setup for {}...", self.environment)
        builder = add_platform_validation_stage(
            PipelineBuilder(),
            self.settings.project_root,
            self.settings.platform_cli,
            self.runner,
            self.deployment_config.platform_env,
            self.settings.output_dir,
        )
        stage_result = await builder.build().execute_stage(STAGE_PLATFORM_VALIDATION)

        result = ConfigValidationResult(
            valid=stage_result.status == CheckStatus.SUCCESS,
            errors=stage_result.errors(),
            warnings=stage_result.warnings(),
        )
        for error in result.errors:
            logger.error("  - {}", error)
        for warning in result.warnings:
            logger.warning("  - {}", warning)
        if result.valid:
            logger.info("Edge platform setup validated successfully")
        return result

    async def validate_pre_build_requirements(self) -> bool:
        """Check the project layout and build script. Never raises.

        Every missing piece is appended to ``self.errors``.
        """
        logger.info("Validating pre-build requirements...")
        stage_result = await self.pipeline.execute_stage(BuildStage.PRE_VALIDATION)
        return self._collect_pre_validation(stage_result)

    def _collect_pre_validation(self, stage_result: StageResult) -> bool:
        if stage_result.status == CheckStatus.SUCCESS:
            logger.info("Pre-build requirements validated successfully")
            return True

        errors = stage_result.errors()
        self.errors.extend(errors)
        logger.error("Pre-build validation failed:")
        for error in errors:
            logger.error("  - {}", error)
        return False

    async def clean_build_output(self) -> None:
        """Remove the previous output directory. Failure is only a warning."""
        logger.info("Cleaning previous build output...")
        stage_result = await self.pipeline.execute_stage(BuildStage.CLEANUP)
        self._collect_cleanup(stage_result)

    def _collect_cleanup(self, stage_result: StageResult) -> None:
        warnings = stage_result.warnings()
        for warning in warnings:
            logger.warning(warning)
        self.warnings.extend(warnings)

    async def execute_build(self) -> BuildExecutionResult:
        """Run the environment build command.

        A failed command is classified and its recovery actions are logged;
        the failure is returned, not raised.
        """
        stage_result = await self.pipeline.execute_stage(BuildStage.BUILD)
        return self._collect_build(stage_result)

    def _collect_build(self, stage_result: StageResult) -> BuildExecutionResult:
        check_result = stage_result.check_results[0]
        details = check_result.details

        if check_result.status == CheckStatus.SUCCESS:
            return BuildExecutionResult(
                success=True,
                build_time_ms=details.get("build_time_ms", 0.0),
                command=details.get("command"),
                output=details.get("output"),
            )

        error = details.get("error") or check_result.message
        kind = ErrorKind(details["kind"]) if details.get("kind") else ErrorKind.UNKNOWN
        self._log_build_failure(DeploymentError(error, kind=kind, raw_output=details.get("output")))

        return BuildExecutionResult(
            success=False,
            command=details.get("command"),
            output=details.get("output"),
            error=error,
            error_kind=kind,
        )

    def _log_build_failure(self, error: DeploymentError) -> None:
        logger.error("Build execution failed: {}", error.message)
        classified = self.error_handler.classify_error(error, BuildStage.BUILD)
        logger.warning("Analyzing build error... classified as {}", classified.kind)
        for action in self.error_handler.get_recovery_actions(classified):
            suggestion = f"{action.description} ({action.command})" if action.command else action.description
            logger.warning("Suggestion: {}", suggestion)

    async def validate_build_output(self) -> BuildValidationResult:
        """Validate the output directory and analyze the produced assets."""
        logger.info("Validating build output...")
        stage_result = await self.pipeline.execute_stage(BuildStage.VALIDATION)
        return self._collect_validation(stage_result)

    def _collect_validation(self, stage_result: StageResult) -> BuildValidationResult:
        assets = BuildAssets()
        for check_result in stage_result.check_results:
            if "assets" in check_result.details:
                assets = BuildAssets.model_validate(check_result.details["assets"])

        result = BuildValidationResult(
            success=stage_result.status == CheckStatus.SUCCESS,
            errors=stage_result.errors(),
            warnings=stage_result.warnings(),
            assets=assets,
        )
        self._report_validation(result)
        return result

    def _report_validation(self, result: BuildValidationResult) -> None:
        if self.dry_run:
            logger.info("[DRY RUN] Build output validation skipped")
            return

        assets = result.assets
        logger.info("Build statistics:")
        logger.info("  Total Files: {}", assets.total_files)
        logger.info("  Total Size: {}", format_file_size(assets.total_size))
        logger.info("  HTML Files: {}", len(assets.html_files))
        logger.info("  JavaScript Files: {}", len(assets.js_files))
        logger.info("  CSS Files: {}", len(assets.css_files))
        logger.info("  Static Assets: {}", len(assets.static_assets))

        for error in result.errors:
            logger.error("  - {}", error)
        for warning in result.warnings:
            logger.warning("  - {}", warning)

        if result.success:
            logger.info("Build output validation passed")
        else:
            logger.error("Build output validation failed")

    async def orchestrate_build(self) -> BuildOrchestrationResult:
        """Run pre-validation, cleanup, build and validation in order.

        Returns:
            BuildOrchestrationResult: ``stage`` names the failing stage, or
                ``validation`` when the whole build succeeded
        """
        logger.info("Starting build orchestration for {} environment", self.environment)
        self.errors = []
        self.warnings = []

        pipeline_result = await self.pipeline.execute()
        result = BuildOrchestrationResult(environment=self.environment)

        for stage_result in pipeline_result.stage_results:
            if stage_result.status == CheckStatus.SKIPPED and not stage_result.check_results:
                break
            result.stage = BuildStage(stage_result.stage_name)

            match stage_result.stage_name:
                case BuildStage.PRE_VALIDATION:
                    if not self._collect_pre_validation(stage_result):
                        result.errors = ["Pre-build validation failed", *self.errors]
                case BuildStage.CLEANUP:
                    self._collect_cleanup(stage_result)
                case BuildStage.BUILD:
                    build = self._collect_build(stage_result)
                    result.build_time_ms = build.build_time_ms
                    result.build_output = build.output
                    if not build.success:
                        result.error_kind = build.error_kind
                        result.errors = [build.error or "Build execution failed"]
                case BuildStage.VALIDATION:
                    validation = self._collect_validation(stage_result)
                    result.validation_time_ms = stage_result.execution_time_ms or 0.0
                    result.assets = validation.assets
                    result.errors = validation.errors
                    self.warnings.extend(validation.warnings)

        result.warnings = list(self.warnings)
        result.total_time_ms = pipeline_result.total_execution_time_ms or 0.0
        result.success = pipeline_result.overall_status == CheckStatus.SUCCESS

        if result.success:
            logger.info("Build orchestration completed successfully in {:.0f}ms", result.total_time_ms)
        else:
            logger.error("Build orchestration failed at stage {}", result.stage)
        return result
