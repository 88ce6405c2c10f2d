"""Deployment executor: build, deploy, verify and report for one environment.

The executor is the top-level state machine of a deployment run. Build and
deploy are each wrapped in the error handler's retry; a terminal failure is
returned as a structured result carrying the error report and recovery
actions, never raised. Status notifications are best effort.

Typical Usage:
    executor = DeploymentExecutor(Environment.PRODUCTION, reporter=reporter)
    result = await executor.deploy_with_verification()
    if not result.success:
        print(f"Failed at {result.stage}: {result.error}")
"""

from collections.abc import Callable

import arrow
from loguru import logger

from pages_deployer.build import BuildOrchestrationResult, BuildOrchestrator, BuildStage
from pages_deployer.constants import DRY_RUN_DEPLOYMENT_ID, STAGE_BUILD, STAGE_DEPLOYMENT
from pages_deployer.environments import ConfigValidationResult, Environment, get_deployment_config, matches_expected_url
from pages_deployer.error_handling import DeploymentErrorHandler, DeploymentRecord, RetryPolicy, RollbackOutcome
from pages_deployer.exceptions import DeploymentError, ErrorKind
from pages_deployer.process import CommandResult, CommandRunner, command_start_error, format_command
from pages_deployer.reporting import StatusReporter, StatusState, StatusUpdate
from pages_deployer.settings import Settings, get_settings
from pages_deployer.verification import DeploymentVerifier, VerificationOptions

from .models import BuildResult, CompleteDeploymentResult, DeploymentResult, DeploymentStage, DeploymentState, DeploymentStatus
from .output_parser import parse_deployment_output

_BUILD_STAGE_ERROR_KINDS = {
    BuildStage.PRE_VALIDATION: ErrorKind.CONFIGURATION,
    BuildStage.VALIDATION: ErrorKind.VALIDATION,
}


def _elapsed_ms(start_time: float) -> float:
    return (arrow.utcnow().float_timestamp - start_time) * 1000


class DeploymentExecutor:
    """Coordinates build, deploy and reporting for one environment.

    All collaborators are injectable; fresh instances are created when
    omitted. The deployment ledger lives in ``error_handler`` for the life of
    the executor.
    """

    def __init__(
        self,
        environment: Environment | str,
        settings: Settings | None = None,
        error_handler: DeploymentErrorHandler | None = None,
        reporter: StatusReporter | None = None,
        runner: CommandRunner | None = None,
        orchestrator: BuildOrchestrator | None = None,
        verifier_factory: Callable[[], DeploymentVerifier] | None = None,
        dry_run: bool = False,
        verbose: bool = False,
    ):
        self.settings = settings or get_settings()
        self.deployment_config = get_deployment_config(environment)
        self.environment = self.deployment_config.environment
        self.dry_run = dry_run
        self.verbose = verbose
        self.reporter = reporter

        self.error_handler = error_handler or DeploymentErrorHandler(
            retry_policy=RetryPolicy.from_settings(self.settings),
            environment=self.environment,
            package_manager=self.settings.package_manager,
            platform_cli=self.settings.platform_cli,
        )
        self.runner = runner or CommandRunner(cwd=self.settings.project_root, timeout_s=self.settings.command_timeout_s)
        self.orchestrator = orchestrator or BuildOrchestrator(
            self.environment,
            settings=self.settings,
            runner=self.runner,
            error_handler=self.error_handler,
            dry_run=dry_run,
            verbose=verbose,
        )
        self.verifier_factory = verifier_factory or (
            lambda: DeploymentVerifier(timeout_ms=self.settings.http_timeout_ms, verbose=self.verbose)
        )

    # Platform

    async def validate_platform(self) -> ConfigValidationResult:
        """Check the platform CLI, its login and the project file for this environment."""
        return await self.orchestrator.validate_platform()

    # Build

    async def execute_build(self) -> BuildResult:
        """Run the build orchestration under retry.

        Returns:
            BuildResult: On failure, carries the classified error report and
                recovery actions
        """
        logger.info("Building application for {}...", self.environment)
        if self.dry_run:
            build_command = self.deployment_config.build_command(self.settings.package_manager)
            logger.info("[DRY RUN] Would build with: {}", format_command(build_command))
            return BuildResult(success=True, build_time_ms=0.0, output_directory=str(self.settings.output_path))

        try:
            orchestration = await self.error_handler.with_retry(self._build_once, "Build Process", STAGE_BUILD)
        except DeploymentError as e:
            logger.error("Build failed: {}", e.message)
            info = await self.error_handler.handle_deployment_error(e, STAGE_BUILD)
            return BuildResult(
                success=False,
                error=e.message,
                error_report=info.report,
                recovery_actions=info.recovery_actions,
            )

        logger.info("Build completed in {:.0f}ms", orchestration.build_time_ms)
        return BuildResult(
            success=True,
            build_time_ms=orchestration.build_time_ms,
            output_directory=str(self.settings.output_path),
            assets=orchestration.assets,
            warnings=orchestration.warnings,
        )

    async def _build_once(self) -> BuildOrchestrationResult:
        result = await self.orchestrator.orchestrate_build()
        if result.success:
            return result

        errors = "; ".join(result.errors) or "Build execution failed"
        kind = ErrorKind(result.error_kind) if result.error_kind else _BUILD_STAGE_ERROR_KINDS.get(result.stage, ErrorKind.UNKNOWN)
        raise DeploymentError(f"Build failed at {result.stage}: {errors}", kind=kind, raw_output=result.build_output)

    # Deploy

    async def execute_deployment(self) -> DeploymentResult:
        """Run the platform deploy command under retry.

        Every attempt is recorded in the deployment ledger as soon as its
        outcome is known.
        """
        logger.info("Deploying to the edge platform ({})...", self.environment)
        command = self.deployment_config.deploy_command(self.settings.output_dir, self.settings.platform_cli)

        if self.dry_run:
            logger.info("[DRY RUN] Would execute: {}", format_command(command))
            return DeploymentResult(
                success=True,
                deploy_time_ms=0.0,
                url=f"https://example-{self.environment}.pages.dev",
                deployment_id=DRY_RUN_DEPLOYMENT_ID,
            )

        try:
            return await self.error_handler.with_retry(lambda: self._deploy_once(command), "Deployment Process", STAGE_DEPLOYMENT)
        except DeploymentError as e:
            info = await self.error_handler.handle_deployment_error(e, STAGE_DEPLOYMENT)
            return DeploymentResult(
                success=False,
                error=e.message,
                error_report=info.report,
                recovery_actions=info.recovery_actions,
                rollback_info=info.rollback_info,
            )

    async def _deploy_once(self, command: list[str]) -> DeploymentResult:
        start_time = arrow.utcnow().float_timestamp
        try:
            output = await self._run_deploy_command(command)
            parsed = parse_deployment_output(output, self.settings.custom_domain_suffixes)
            if not parsed.url:
                raise DeploymentError("Deployment output did not contain a deployment URL", kind=ErrorKind.VALIDATION, raw_output=output)
        except DeploymentError as e:
            logger.error("Deployment failed: {}", e.message)
            self.error_handler.record_deployment(f"failed-{int(arrow.utcnow().float_timestamp * 1000)}", "", success=False)
            raise

        deploy_time_ms = _elapsed_ms(start_time)
        deployment_id = parsed.deployment_id or f"deployment-{int(arrow.utcnow().float_timestamp * 1000)}"
        self.error_handler.record_deployment(deployment_id, parsed.url, success=True)

        logger.info("Deployment completed in {:.0f}ms", deploy_time_ms)
        logger.info("Application URL: {}", parsed.url)
        if parsed.preview_url:
            logger.info("Preview URL: {}", parsed.preview_url)
        if not matches_expected_url(self.environment, parsed.url):
            logger.warning("Deployment URL {} does not match the expected pattern for {}", parsed.url, self.environment)

        return DeploymentResult(
            success=True,
            deploy_time_ms=deploy_time_ms,
            url=parsed.url,
            preview_url=parsed.preview_url,
            deployment_id=parsed.deployment_id,
        )

    async def _run(self, command: list[str], check: bool = True) -> CommandResult:
        try:
            return await self.runner.run(command, check=check)
        except OSError as e:
            raise command_start_error(command, e) from e

    async def _run_deploy_command(self, command: list[str]) -> str:
        """Run the deploy command and return its output.

        The platform CLI sometimes exits non-zero after a successful upload;
        the output's success markers decide in that case.
        """
        result = await self._run(command, check=False)
        if result.ok:
            return result.output

        if any(marker in result.output for marker in self.settings.success_markers):
            logger.warning("Deploy command exited with {} but reported success", result.returncode)
            return result.output

        raise DeploymentError(
            f"Command failed with exit code {result.returncode}: {format_command(command)}",
            raw_output=result.output,
        )

    # Full run

    async def _report(self, update: StatusUpdate) -> None:
        if self.reporter is None or self.dry_run:
            return
        try:
            await self.reporter.report_deployment_status(update)
            logger.debug("Reported {} status", update.status)
        except Exception as e:
            logger.warning("Failed to report {} status: {}", update.status, e)

    async def deploy(self) -> CompleteDeploymentResult:
        """Build, then deploy. Deploy is never attempted after a failed build."""
        logger.info("Starting deployment process for {}...", self.environment)
        start_time = arrow.utcnow().float_timestamp

        await self._report(StatusUpdate(status=StatusState.PENDING, description=f"Starting deployment to {self.environment}"))

        build = await self.execute_build()
        if not build.success:
            await self._report(StatusUpdate(status=StatusState.FAILURE, description="Build failed", error=build.error))
            return CompleteDeploymentResult(
                success=False,
                environment=self.environment,
                stage=DeploymentStage.BUILD,
                error=build.error,
                error_report=build.error_report,
                recovery_actions=build.recovery_actions,
                build_time_ms=build.build_time_ms,
                deploy_time_ms=0.0,
                total_time_ms=_elapsed_ms(start_time),
            )

        deployment = await self.execute_deployment()
        if not deployment.success:
            await self._report(
                StatusUpdate(
                    status=StatusState.FAILURE,
                    description="Deployment failed",
                    error=deployment.error,
                    build_time_ms=build.build_time_ms,
                )
            )
            return CompleteDeploymentResult(
                success=False,
                environment=self.environment,
                stage=DeploymentStage.DEPLOY,
                error=deployment.error,
                error_report=deployment.error_report,
                recovery_actions=deployment.recovery_actions,
                rollback_info=deployment.rollback_info,
                build_time_ms=build.build_time_ms,
                deploy_time_ms=deployment.deploy_time_ms,
                total_time_ms=_elapsed_ms(start_time),
            )

        result = CompleteDeploymentResult(
            success=True,
            environment=self.environment,
            build_time_ms=build.build_time_ms,
            deploy_time_ms=deployment.deploy_time_ms,
            total_time_ms=_elapsed_ms(start_time),
            url=deployment.url,
            preview_url=deployment.preview_url,
            deployment_id=deployment.deployment_id,
        )
        logger.info("Deployment completed successfully in {:.0f}ms", result.total_time_ms)

        await self._report(
            StatusUpdate(
                status=StatusState.SUCCESS,
                description="Deployment completed successfully",
                url=deployment.url,
                preview_url=deployment.preview_url,
                build_time_ms=build.build_time_ms,
                deploy_time_ms=deployment.deploy_time_ms,
            )
        )
        return result

    async def deploy_with_verification(
        self,
        skip_spa_routing: bool = False,
        skip_asset_optimization: bool = False,
    ) -> CompleteDeploymentResult:
        """Deploy, then verify the live URL.

        The verification result is attached to the returned result; a failed
        verification does not mark the deployment as failed.
        """
        result = await self.deploy()
        if not result.success or not result.url:
            return result

        if self.dry_run:
            logger.info("[DRY RUN] Would verify {}", result.url)
            return result

        logger.info("Starting post-deployment verification...")
        verifier = self.verifier_factory()
        verification = await verifier.verify(
            VerificationOptions(
                url=result.url,
                skip_spa_routing=skip_spa_routing,
                skip_asset_optimization=skip_asset_optimization,
            )
        )

        if verification.success:
            logger.info("Post-deployment verification passed")
        else:
            logger.error("Post-deployment verification failed")
            if self.verbose:
                logger.info("\n{}", verifier.format_results(verification))

        result.verification = verification
        return result

    # Status, rollback and history

    async def get_deployment_status(self, deployment_id: str) -> DeploymentStatus:
        """Query the platform for whether ``deployment_id`` is the active deployment.

        Raises:
            ValueError: If ``deployment_id`` is empty
        """
        if not deployment_id:
            raise ValueError("Deployment ID is required")

        command = [self.settings.platform_cli, "pages", "deployment", "list", "--limit", "1"]
        try:
            result = await self._run(command)
        except DeploymentError as e:
            logger.error("Failed to get deployment status: {}", e.message)
            return DeploymentStatus(id=deployment_id, status=DeploymentState.ERROR, error=e.message)

        is_active = deployment_id in result.output and "Active" in result.output
        return DeploymentStatus(id=deployment_id, status=DeploymentState.ACTIVE if is_active else DeploymentState.UNKNOWN)

    async def rollback(self) -> RollbackOutcome:
        """Identify the rollback target and report it.

        The restore command is returned, not run, so the status update stays
        pending until someone restores the target.
        """
        logger.warning("Initiating deployment rollback...")
        outcome = await self.error_handler.rollback()

        if not outcome.success:
            logger.error("Rollback failed: {}", outcome.message)
            return outcome

        logger.info("Rollback target: {} ({})", outcome.previous_deployment_id, outcome.previous_url)
        if outcome.command:
            logger.info("Restore it with: {}", outcome.command)
        await self._report(
            StatusUpdate(
                status=StatusState.PENDING,
                description=f"Rollback target identified: {outcome.previous_deployment_id}",
                url=outcome.previous_url,
            )
        )
        return outcome

    def get_deployment_history(self) -> list[DeploymentRecord]:
        return self.error_handler.get_deployment_history()
