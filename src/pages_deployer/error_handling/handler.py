"""Deployment error handling and recovery.

The DeploymentErrorHandler wraps fallible async operations with bounded
retry, keeps the deployment ledger used for rollback, and turns raw errors
into classified reports with concrete recovery actions.

Typical Usage:
    handler = DeploymentErrorHandler(environment=Environment.PRODUCTION)
    try:
        result = await handler.with_retry(run_deploy, "Deployment Process", "deployment")
    except DeploymentError as e:
        info = await handler.handle_deployment_error(e, "deployment")
        print(info.report)
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from pages_deployer.environments import Environment, get_deployment_config
from pages_deployer.exceptions import ErrorKind
from pages_deployer.process import format_command

from .classifier import classify_error, is_retryable
from .ledger import DeploymentLedger
from .models import (
    ClassifiedError,
    DeploymentRecord,
    ErrorHandlingResult,
    RecoveryAction,
    RecoveryActionType,
    RetryState,
    RollbackInfo,
    RollbackOutcome,
)
from .retry import RetryPolicy

T = TypeVar("T")

ROLLBACK_COMMAND_TEMPLATE = "{cli} rollback {deployment_id}"


class DeploymentErrorHandler:
    """Retry, ledger and recovery guidance for one deployment executor.

    Attributes:
        retry_policy: Backoff policy used by ``with_retry``
        ledger: Deployment history owned by this handler
    """

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        environment: Environment | None = None,
        package_manager: str = "npm",
        platform_cli: str = "wrangler",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the handler.

        Args:
            retry_policy: Backoff policy, defaults to 3 attempts / 2s / x2 / 30s cap
            environment: Environment used to render build commands in suggestions
            package_manager: Package manager named in install/build suggestions
            platform_cli: Platform CLI named in login/rollback suggestions
            sleep: Coroutine used for backoff delays
        """
        self.retry_policy = retry_policy or RetryPolicy()
        self.environment = environment
        self.package_manager = package_manager
        self.platform_cli = platform_cli
        self.ledger = DeploymentLedger()
        self._sleep = sleep

    # Retry

    async def with_retry(self, operation: Callable[[], Awaitable[T]], operation_name: str, category: str) -> T:
        """Run ``operation`` with bounded exponential backoff.

        Only transient failures (network, timeout, rate limit, platform
        unavailable) are retried; anything else is raised on first failure.

        Args:
            operation: Zero-argument coroutine function
            operation_name: Name used in log messages
            category: Stage the operation belongs to (build, deployment, ...)

        Returns:
            The operation's result

        Raises:
            Exception: The last error once attempts are exhausted, or the first
                non-retryable error
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_policy.max_attempts),
            wait=self.retry_policy.wait_strategy(),
            retry=retry_if_exception(is_retryable),
            reraise=True,
            sleep=self._sleep,
            before_sleep=self._before_sleep(operation_name, category),
        )

        # tenacity only awaits callables it recognises as coroutine functions
        async def attempt() -> T:
            return await operation()

        return await retrying(attempt)

    def _before_sleep(self, operation_name: str, category: str) -> Callable[[RetryCallState], None]:
        def log_retry(retry_state: RetryCallState) -> None:
            state = RetryState(
                operation=operation_name,
                attempt=retry_state.attempt_number,
                max_attempts=self.retry_policy.max_attempts,
                delay_s=retry_state.next_action.sleep if retry_state.next_action else 0.0,
            )
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "{} ({}) attempt {}/{} failed: {}. Retrying in {:.1f}s",
                state.operation,
                category,
                state.attempt,
                state.max_attempts,
                error,
                state.delay_s,
            )

        return log_retry

    def calculate_retry_delay(self, attempt: int) -> float:
        """Delay in seconds applied after ``attempt`` fails."""
        return self.retry_policy.delay_for(attempt)

    # Ledger and rollback

    def record_deployment(self, deployment_id: str, url: str, success: bool) -> DeploymentRecord:
        """Append a deployment attempt to the ledger."""
        return self.ledger.record(deployment_id, url, success)

    def get_deployment_history(self) -> list[DeploymentRecord]:
        """Return the ledger, oldest first."""
        return self.ledger.history()

    def get_rollback_info(self) -> RollbackInfo:
        target = self.ledger.rollback_target()
        if target is None:
            return RollbackInfo(rollback_available=False)

        return RollbackInfo(
            previous_deployment_id=target.id,
            previous_url=target.url,
            rollback_available=True,
            rollback_command=ROLLBACK_COMMAND_TEMPLATE.format(cli=self.platform_cli, deployment_id=target.id),
        )

    async def rollback(self) -> RollbackOutcome:
        """Identify the rollback target and the command that restores it."""
        info = self.get_rollback_info()
        if not info.rollback_available:
            return RollbackOutcome(success=False, message="No previous successful deployment found for rollback")

        return RollbackOutcome(
            success=True,
            message=f"Rollback target available. Previous deployment: {info.previous_url}",
            previous_url=info.previous_url,
            previous_deployment_id=info.previous_deployment_id,
            command=info.rollback_command,
        )

    # Classification and reporting

    def classify_error(self, error: BaseException | str, stage: str) -> ClassifiedError:
        return classify_error(error, stage)

    def _build_command(self) -> str:
        if self.environment is None:
            return f"{self.package_manager} run build"
        return format_command(get_deployment_config(self.environment).build_command(self.package_manager))

    def get_recovery_actions(self, error: ClassifiedError) -> list[RecoveryAction]:
        """Suggest next steps for a classified error."""
        actions: list[RecoveryAction] = []
        text = f"{error.message}\n{error.raw_output or ''}".lower()

        match error.kind:
            case ErrorKind.NETWORK | ErrorKind.TIMEOUT:
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.RETRY,
                        description="Retry the operation after network connectivity is restored",
                        automated=True,
                    )
                )
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.MANUAL,
                        description="Check network connectivity, proxy and firewall settings",
                    )
                )
            case ErrorKind.RATE_LIMIT:
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.RETRY,
                        description="Wait for the platform rate limit to reset and retry",
                        automated=True,
                    )
                )
            case ErrorKind.PLATFORM_UNAVAILABLE:
                actions.append(
                    RecoveryAction(type=RecoveryActionType.RETRY, description="Retry once the platform recovers", automated=True)
                )
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.MANUAL,
                        description="Check the hosting platform status page for an ongoing incident",
                    )
                )
            case ErrorKind.AUTHENTICATION:
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.MANUAL,
                        description="Re-authenticate the platform CLI",
                        command=f"{self.platform_cli} login",
                    )
                )
            case ErrorKind.DEPENDENCY:
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.MANUAL,
                        description="Install missing dependencies",
                        command=f"{self.package_manager} install",
                    )
                )
            case ErrorKind.RESOURCE:
                if "enospc" in text or "no space" in text:
                    actions.append(
                        RecoveryAction(
                            type=RecoveryActionType.MANUAL,
                            description="Free up disk space and retry the build",
                        )
                    )
                else:
                    actions.append(
                        RecoveryAction(
                            type=RecoveryActionType.MANUAL,
                            description="Raise the Node.js memory limit for the build",
                            command=f"NODE_OPTIONS=--max-old-space-size=4096 {self._build_command()}",
                        )
                    )
            case ErrorKind.CONFIGURATION:
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.MANUAL,
                        description="Review the project configuration, build scripts and environment variables",
                    )
                )
            case ErrorKind.BUILD:
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.MANUAL,
                        description="Fix build errors and retry the deployment",
                        command=self._build_command(),
                    )
                )
            case ErrorKind.VALIDATION:
                actions.append(
                    RecoveryAction(type=RecoveryActionType.MANUAL, description="Fix validation errors and retry")
                )
            case _:
                actions.append(
                    RecoveryAction(
                        type=RecoveryActionType.MANUAL,
                        description="Inspect the command output above and rerun with --verbose",
                    )
                )

        rollback_info = self.get_rollback_info()
        if rollback_info.rollback_available and error.recoverable:
            actions.append(
                RecoveryAction(
                    type=RecoveryActionType.ROLLBACK,
                    description=f"Rollback to previous deployment ({rollback_info.previous_url})",
                    command=rollback_info.rollback_command,
                    automated=True,
                )
            )

        return actions

    def generate_error_report(self, error: ClassifiedError, actions: list[RecoveryAction] | None = None) -> str:
        """Render a multi-line report: what failed, likely cause, next steps."""
        actions = self.get_recovery_actions(error) if actions is None else actions
        rule = "=" * 60
        lines = [
            rule,
            "DEPLOYMENT ERROR REPORT",
            rule,
            "",
            f"Error Type: {error.kind.upper()}",
            f"Error Code: {error.code}",
            f"Stage: {error.stage}",
            f"Time: {error.timestamp}",
            f"Retryable: {'Yes' if error.retryable else 'No'}",
            f"Recoverable: {'Yes' if error.recoverable else 'No'}",
            "",
            "Error Message:",
            error.message,
            "",
            "Likely Cause:",
            _LIKELY_CAUSES.get(error.kind, _LIKELY_CAUSES[ErrorKind.UNKNOWN]),
            "",
        ]

        if error.raw_output:
            tail = error.raw_output.strip().splitlines()[-15:]
            lines.append("Command Output (last lines):")
            lines.extend(f"  {line}" for line in tail)
            lines.append("")

        if actions:
            lines.append("RECOVERY OPTIONS:")
            lines.append("-" * 20)
            for index, action in enumerate(actions, start=1):
                lines.append(f"{index}. {action.description}")
                if action.command:
                    lines.append(f"   Command: {action.command}")
                lines.append(f"   Type: {'Automated' if action.automated else 'Manual'}")
                lines.append("")

        rollback_info = self.get_rollback_info()
        if rollback_info.rollback_available:
            lines.append("ROLLBACK INFORMATION:")
            lines.append("-" * 22)
            lines.append(f"Previous Deployment: {rollback_info.previous_url}")
            if rollback_info.rollback_command:
                lines.append(f"Rollback Command: {rollback_info.rollback_command}")
            lines.append("")

        lines.append(rule)
        return "\n".join(lines)

    async def handle_deployment_error(self, error: BaseException | str, stage: str) -> ErrorHandlingResult:
        """Classify an error and produce its report and recovery actions."""
        classified = self.classify_error(error, stage)
        actions = self.get_recovery_actions(classified)
        logger.debug("Classified {} failure as {}", stage, classified.kind)

        return ErrorHandlingResult(
            error=classified,
            report=self.generate_error_report(classified, actions),
            recovery_actions=actions,
            rollback_info=self.get_rollback_info(),
        )


_LIKELY_CAUSES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "A network connection to the platform failed or was reset.",
    ErrorKind.TIMEOUT: "The operation did not finish within its time limit.",
    ErrorKind.RATE_LIMIT: "The platform is rate limiting requests from this account.",
    ErrorKind.PLATFORM_UNAVAILABLE: "The hosting platform is temporarily unavailable.",
    ErrorKind.CONFIGURATION: "A required file, build script or environment variable is missing.",
    ErrorKind.DEPENDENCY: "A package or build tool is not installed.",
    ErrorKind.RESOURCE: "The build ran out of memory or disk space.",
    ErrorKind.AUTHENTICATION: "The platform CLI is not logged in or its token is invalid.",
    ErrorKind.BUILD: "The application failed to compile.",
    ErrorKind.VALIDATION: "The build output or configuration failed validation.",
    ErrorKind.UNKNOWN: "The failure did not match a known pattern.",
}
