"""Tests for recovery actions and error reports."""

import pytest

from pages_deployer.environments import Environment
from pages_deployer.error_handling import DeploymentErrorHandler, RecoveryActionType
from pages_deployer.exceptions import DeploymentError, ErrorKind


class TestRecoveryActions:
    """Suggested next steps per error kind."""

    def test_network_error_suggests_retry(self):
        handler = DeploymentErrorHandler()

        actions = handler.get_recovery_actions(handler.classify_error("ECONNRESET", "deployment"))

        assert actions[0].type == RecoveryActionType.RETRY
        assert actions[0].automated is True

    def test_authentication_error_suggests_login(self):
        handler = DeploymentErrorHandler(platform_cli="wrangler")

        actions = handler.get_recovery_actions(handler.classify_error("Not logged in", "deployment"))

        assert [action.command for action in actions] == ["wrangler login"]

    def test_dependency_error_suggests_install(self):
        handler = DeploymentErrorHandler(package_manager="pnpm")

        actions = handler.get_recovery_actions(handler.classify_error("Cannot find module 'vite'", "build"))

        assert actions[0].command == "pnpm install"

    def test_memory_error_suggests_larger_heap(self):
        handler = DeploymentErrorHandler(environment=Environment.PRODUCTION)

        actions = handler.get_recovery_actions(handler.classify_error("JavaScript heap out of memory", "build"))

        assert actions[0].command == "NODE_OPTIONS=--max-old-space-size=4096 npm run build:production"

    def test_disk_error_suggests_freeing_space(self):
        handler = DeploymentErrorHandler()

        actions = handler.get_recovery_actions(handler.classify_error("ENOSPC: no space left on device", "build"))

        assert actions[0].description == "Free up disk space and retry the build"
        assert actions[0].command is None

    def test_rollback_offered_when_target_exists(self):
        handler = DeploymentErrorHandler()
        handler.record_deployment("A", "https://a.pages.dev", True)
        handler.record_deployment("failed-1", "", False)

        actions = handler.get_recovery_actions(handler.classify_error("ECONNRESET", "deployment"))

        assert actions[-1].type == RecoveryActionType.ROLLBACK
        assert actions[-1].command == "wrangler rollback A"
        assert "https://a.pages.dev" in actions[-1].description

    def test_no_rollback_without_target(self):
        handler = DeploymentErrorHandler()

        actions = handler.get_recovery_actions(handler.classify_error("ECONNRESET", "deployment"))

        assert all(action.type != RecoveryActionType.ROLLBACK for action in actions)


class TestErrorReport:
    """Rendered error reports."""

    @pytest.mark.asyncio
    async def test_report_contents(self):
        handler = DeploymentErrorHandler(environment=Environment.STAGING)
        error = DeploymentError("Build failed with 1 error", kind=ErrorKind.BUILD)

        result = await handler.handle_deployment_error(error, "build")

        assert result.error.kind == ErrorKind.BUILD
        assert result.error.code == "BUILD_ERROR"
        assert result.error.retryable is False
        assert "DEPLOYMENT ERROR REPORT" in result.report
        assert "Error Type: BUILD" in result.report
        assert "Stage: build" in result.report
        assert "Retryable: No" in result.report
        assert "Build failed with 1 error" in result.report
        assert "The application failed to compile." in result.report
        assert "RECOVERY OPTIONS:" in result.report
        assert "Command: npm run build:staging" in result.report
        assert "ROLLBACK INFORMATION:" not in result.report
        assert result.rollback_info.rollback_available is False

    @pytest.mark.asyncio
    async def test_report_includes_output_tail(self):
        handler = DeploymentErrorHandler()
        output = "\n".join(f"output-{i:02d}" for i in range(20))

        result = await handler.handle_deployment_error(DeploymentError("Command failed", raw_output=output), "deployment")

        assert "Command Output (last lines):" in result.report
        assert "output-04" not in result.report
        assert "output-05" in result.report
        assert "output-19" in result.report

    @pytest.mark.asyncio
    async def test_report_includes_rollback_information(self):
        handler = DeploymentErrorHandler()
        handler.record_deployment("abc123", "https://agendai.clubemkt.digital", True)
        handler.record_deployment("failed-2", "", False)

        result = await handler.handle_deployment_error("ECONNRESET", "deployment")

        assert "Retryable: Yes" in result.report
        assert "ROLLBACK INFORMATION:" in result.report
        assert "Previous Deployment: https://agendai.clubemkt.digital" in result.report
        assert "Rollback Command: wrangler rollback abc123" in result.report
        assert result.rollback_info.previous_deployment_id == "abc123"
