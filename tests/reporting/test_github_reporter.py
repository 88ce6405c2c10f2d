"""Tests for the GitHub deployment status reporter."""

import json

import httpx
import pytest

from pages_deployer.environments import Environment
from pages_deployer.exceptions import DeploymentError, ErrorKind
from pages_deployer.reporting import (
    COMMENT_MARKER,
    GitHubDeploymentStatusReporter,
    GitHubReporterConfig,
    StatusState,
    StatusUpdate,
    create_reporter_from_settings,
)
from pages_deployer.settings import Settings

REPO = "https://api.github.com/repos/acme/site"


class FakeGitHub:
    """Minimal GitHub REST API double recording every request."""

    def __init__(self, existing_comments: list[dict] | None = None, fail_paths: dict[str, int] | None = None):
        self.requests: list[tuple[str, str, dict | None]] = []
        self.existing_comments = existing_comments or []
        self.fail_paths = fail_paths or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/repos/acme/site")
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        for prefix, status in self.fail_paths.items():
            if path.startswith(prefix):
                return httpx.Response(status, json={"message": "nope"})

        if request.method == "GET":
            return httpx.Response(200, json=self.existing_comments)
        if path == "/deployments":
            return httpx.Response(201, json={"id": 42})
        return httpx.Response(201 if request.method == "POST" else 200, json={"id": 7})

    def paths(self) -> list[tuple[str, str]]:
        return [(method, path) for method, path, _ in self.requests]


def make_reporter(github: FakeGitHub, pull_request_number: int | None = None) -> GitHubDeploymentStatusReporter:
    config = GitHubReporterConfig(
        owner="acme",
        repo="site",
        token="ghs_example",
        sha="0123456789abcdef",
        environment=Environment.STAGING,
        pull_request_number=pull_request_number,
    )
    return GitHubDeploymentStatusReporter(config, client=httpx.AsyncClient(transport=httpx.MockTransport(github)))


class TestReportDeploymentStatus:
    """Deployment record, statuses and commit status."""

    @pytest.mark.asyncio
    async def test_pending_creates_deployment(self):
        github = FakeGitHub()
        reporter = make_reporter(github)

        await reporter.report_deployment_status(StatusUpdate(status=StatusState.PENDING, description="Starting deployment to staging"))

        assert reporter.deployment_id == 42
        assert github.paths() == [
            ("POST", "/deployments"),
            ("POST", "/deployments/42/statuses"),
            ("POST", "/statuses/0123456789abcdef"),
        ]
        _, _, deployment = github.requests[0]
        assert deployment["ref"] == "0123456789abcdef"
        assert deployment["environment"] == "staging"
        assert deployment["required_contexts"] == []
        _, _, commit_status = github.requests[2]
        assert commit_status["context"] == "cloudflare-pages/staging"
        assert commit_status["state"] == "pending"

    @pytest.mark.asyncio
    async def test_later_updates_reuse_deployment(self):
        github = FakeGitHub()
        reporter = make_reporter(github)

        await reporter.report_deployment_status(StatusUpdate(status=StatusState.PENDING, description="Starting"))
        await reporter.report_deployment_status(
            StatusUpdate(status=StatusState.SUCCESS, description="Done", url="https://staging.agendai.clubemkt.digital")
        )

        assert github.paths().count(("POST", "/deployments")) == 1
        method, path, status = github.requests[-2]
        assert (method, path) == ("POST", "/deployments/42/statuses")
        assert status["state"] == "success"
        assert status["environment_url"] == "https://staging.agendai.clubemkt.digital"

    @pytest.mark.asyncio
    async def test_update_without_deployment_only_posts_commit_status(self):
        github = FakeGitHub()

        await make_reporter(github).report_deployment_status(StatusUpdate(status=StatusState.FAILURE, description="Build failed"))

        assert github.paths() == [("POST", "/statuses/0123456789abcdef")]

    @pytest.mark.asyncio
    async def test_commit_status_failure_is_only_logged(self):
        github = FakeGitHub(fail_paths={"/statuses": 422})
        reporter = make_reporter(github)

        await reporter.report_deployment_status(StatusUpdate(status=StatusState.PENDING, description="Starting"))

        assert reporter.deployment_id == 42

    @pytest.mark.asyncio
    async def test_authentication_failure_raises(self):
        github = FakeGitHub(fail_paths={"/deployments": 401})

        with pytest.raises(DeploymentError) as exc_info:
            await make_reporter(github).report_deployment_status(StatusUpdate(status=StatusState.PENDING, description="Starting"))

        assert exc_info.value.kind == ErrorKind.AUTHENTICATION

    @pytest.mark.asyncio
    async def test_transport_failure_is_a_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        config = GitHubReporterConfig(owner="acme", repo="site", token="t", sha="abc", environment=Environment.PRODUCTION)
        reporter = GitHubDeploymentStatusReporter(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        with pytest.raises(DeploymentError) as exc_info:
            await reporter.create_deployment("Deploy")

        assert exc_info.value.kind == ErrorKind.NETWORK


class TestPullRequestComment:
    """Single status comment per pull request."""

    @pytest.mark.asyncio
    async def test_creates_comment(self):
        github = FakeGitHub(existing_comments=[{"id": 1, "body": "LGTM"}])

        await make_reporter(github, pull_request_number=12).report_deployment_status(
            StatusUpdate(status=StatusState.FAILURE, description="Build failed", error="tsc exited with 2")
        )

        method, path, body = github.requests[-1]
        assert (method, path) == ("POST", "/issues/12/comments")
        assert body["body"].startswith(COMMENT_MARKER)

    @pytest.mark.asyncio
    async def test_updates_existing_comment(self):
        github = FakeGitHub(existing_comments=[{"id": 99, "body": f"{COMMENT_MARKER}\nold status"}])

        await make_reporter(github, pull_request_number=12).report_deployment_status(
            StatusUpdate(status=StatusState.FAILURE, description="Build failed")
        )

        assert github.paths()[-2:] == [("GET", "/issues/12/comments"), ("PATCH", "/issues/comments/99")]

    def test_success_message(self):
        reporter = make_reporter(FakeGitHub())
        update = StatusUpdate(
            status=StatusState.SUCCESS,
            description="Deployment completed successfully",
            url="https://staging.agendai.clubemkt.digital",
            preview_url="https://a1b2c3d4.agendai-saas-staging.pages.dev",
            build_time_ms=42_400,
            deploy_time_ms=8_600,
        )

        message = reporter.generate_deployment_message(update)

        assert "✅ **Successful** deployment to **staging**" in message
        assert "**Commit:** `0123456`" in message
        assert "🌐 **Live URL:** https://staging.agendai.clubemkt.digital" in message
        assert "🔗 **Preview URL:** https://a1b2c3d4.agendai-saas-staging.pages.dev" in message
        assert "- Build time: 42s" in message
        assert "- Deploy time: 9s" in message
        assert "Error Details" not in message

    def test_failure_message(self):
        reporter = make_reporter(FakeGitHub())

        message = reporter.generate_deployment_message(
            StatusUpdate(status=StatusState.FAILURE, description="Deployment failed", error="Not logged in")
        )

        assert "❌ **Failed** deployment" in message
        assert "```\nNot logged in\n```" in message
        assert "https://github.com/acme/site/actions" in message

    def test_pending_message(self):
        message = make_reporter(FakeGitHub()).generate_deployment_message(StatusUpdate(status=StatusState.PENDING, description="Starting"))

        assert "⏳ **In Progress**" in message
        assert "Deployment is currently in progress..." in message


class TestCreateReporterFromSettings:
    """Reporter construction from settings."""

    def test_unconfigured(self, settings: Settings):
        assert create_reporter_from_settings(settings, Environment.STAGING) is None

    def test_configured(self, tmp_path):
        settings = Settings(
            _env_file=None,
            project_root=tmp_path,
            github_token="ghs_example",
            github_repository="acme/site",
            github_sha="abc123",
            github_pr_number=5,
        )

        reporter = create_reporter_from_settings(settings, Environment.PREVIEW)

        assert reporter is not None
        assert reporter.config.repository_url == REPO
        assert reporter.config.pull_request_number == 5
        assert reporter.config.environment == Environment.PREVIEW

    @pytest.mark.parametrize("repository", ["acme", "acme/", "/site"])
    def test_malformed_repository(self, tmp_path, repository: str):
        settings = Settings(_env_file=None, project_root=tmp_path, github_token="t", github_repository=repository, github_sha="abc")

        assert create_reporter_from_settings(settings, Environment.STAGING) is None
