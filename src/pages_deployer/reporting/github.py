"""GitHub deployment status reporting.

Reports a deployment to GitHub as a deployment record with statuses, a commit
status and, for pull requests, a single status comment that is updated in
place on every notification.
"""

from typing import Any, Protocol

import arrow
import httpx
from loguru import logger

from pages_deployer.environments import Environment
from pages_deployer.exceptions import DeploymentError, ErrorKind
from pages_deployer.settings import Settings

from .models import GitHubReporterConfig, StatusState, StatusUpdate

COMMENT_MARKER = "<!-- deployment-status-comment -->"

_STATUS_LABELS: dict[str, tuple[str, str]] = {
    StatusState.PENDING: ("⏳", "In Progress"),
    StatusState.SUCCESS: ("✅", "Successful"),
    StatusState.FAILURE: ("❌", "Failed"),
    StatusState.ERROR: ("🚨", "Error"),
}


class StatusReporter(Protocol):
    """Receives deployment status notifications."""

    async def report_deployment_status(self, update: StatusUpdate) -> None: ...


class GitHubDeploymentStatusReporter:
    """Posts deployment statuses to the GitHub REST API.

    The deployment record is created on the first ``pending`` update; later
    updates post statuses to the same record.
    """

    def __init__(self, config: GitHubReporterConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self.deployment_id: int | None = None
        self._client = client

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.config.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        url = f"{self.config.repository_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, json=json, headers=self._headers)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.request(method, url, json=json, headers=self._headers)
        except httpx.HTTPError as e:
            raise DeploymentError(f"GitHub API request failed: {e}", kind=ErrorKind.NETWORK) from e

        if not response.is_success:
            kind = ErrorKind.AUTHENTICATION if response.status_code in (401, 403) else ErrorKind.UNKNOWN
            raise DeploymentError(
                f"GitHub API error: {response.status_code} {response.reason_phrase} - {response.text}",
                kind=kind,
            )
        return response.json() if response.content else None

    async def create_deployment(self, description: str) -> int:
        deployment = await self._request(
            "POST",
            "/deployments",
            json={
                "ref": self.config.sha,
                "environment": self.config.environment,
                "description": description or f"Deploy to {self.config.environment}",
                "auto_merge": False,
                "required_contexts": [],
            },
        )
        self.deployment_id = deployment["id"]
        logger.debug("Created GitHub deployment {}", self.deployment_id)
        return self.deployment_id

    async def update_deployment_status(self, deployment_id: int, update: StatusUpdate) -> int:
        status = await self._request(
            "POST",
            f"/deployments/{deployment_id}/statuses",
            json={
                "state": update.status,
                "description": update.description,
                "environment_url": update.url,
                "environment": self.config.environment,
            },
        )
        return status["id"]

    async def create_commit_status(self, update: StatusUpdate) -> int:
        status = await self._request(
            "POST",
            f"/statuses/{self.config.sha}",
            json={
                "state": update.status,
                "description": update.description[:140],
                "target_url": update.url,
                "context": f"cloudflare-pages/{self.config.environment}",
            },
        )
        return status["id"]

    async def upsert_pull_request_comment(self, body: str) -> int:
        """Create the status comment, or update it if the PR already has one."""
        number = self.config.pull_request_number
        comments = await self._request("GET", f"/issues/{number}/comments")
        existing = next((c for c in comments or [] if COMMENT_MARKER in (c.get("body") or "")), None)

        if existing:
            await self._request("PATCH", f"/issues/comments/{existing['id']}", json={"body": body})
            return existing["id"]

        comment = await self._request("POST", f"/issues/{number}/comments", json={"body": body})
        return comment["id"]

    def generate_deployment_message(self, update: StatusUpdate) -> str:
        """Markdown body of the pull request status comment."""
        emoji, label = _STATUS_LABELS[update.status]
        lines = [
            COMMENT_MARKER,
            "## 🚀 Deployment Status",
            "",
            f"{emoji} **{label}** deployment to **{self.config.environment}**",
            "",
            f"**Commit:** `{self.config.sha[:7]}`",
        ]

        if update.status == StatusState.PENDING:
            lines += ["", "⏱️ Deployment is currently in progress..."]
        if update.url:
            lines.append(f"🌐 **Live URL:** {update.url}")
        if update.preview_url and update.preview_url != update.url:
            lines.append(f"🔗 **Preview URL:** {update.preview_url}")

        if update.status == StatusState.SUCCESS and (update.build_time_ms or update.deploy_time_ms):
            lines += ["", "**Performance:**"]
            if update.build_time_ms:
                lines.append(f"- Build time: {round(update.build_time_ms / 1000)}s")
            if update.deploy_time_ms:
                lines.append(f"- Deploy time: {round(update.deploy_time_ms / 1000)}s")

        if update.status in (StatusState.FAILURE, StatusState.ERROR):
            if update.error:
                lines += ["", "**Error Details:**", "```", update.error, "```"]
            lines += [
                "",
                f"💡 Check the [workflow logs](https://github.com/{self.config.owner}/{self.config.repo}/actions) for more details.",
            ]

        lines += ["", "---", f"*Updated at {arrow.utcnow().isoformat()}*"]
        return "\n".join(lines)

    async def report_deployment_status(self, update: StatusUpdate) -> None:
        """Report one status update.

        Raises:
            DeploymentError: If the deployment record or its status cannot be
                posted. Commit status and comment failures are only logged.
        """
        if self.deployment_id is None and update.status == StatusState.PENDING:
            await self.create_deployment(update.description)

        if self.deployment_id is not None:
            await self.update_deployment_status(self.deployment_id, update)

        try:
            await self.create_commit_status(update)
        except DeploymentError as e:
            logger.warning("Failed to create commit status: {}", e)

        if self.config.pull_request_number:
            try:
                await self.upsert_pull_request_comment(self.generate_deployment_message(update))
            except DeploymentError as e:
                logger.warning("Failed to add pull request comment: {}", e)


def create_reporter_from_settings(
    settings: Settings,
    environment: Environment,
    client: httpx.AsyncClient | None = None,
) -> GitHubDeploymentStatusReporter | None:
    """Build a GitHub reporter, or ``None`` when GitHub is not configured."""
    missing = [
        name
        for name, value in (
            ("GITHUB_TOKEN", settings.github_token),
            ("GITHUB_REPOSITORY", settings.github_repository),
            ("GITHUB_SHA", settings.github_sha),
        )
        if not value
    ]
    if missing:
        logger.debug("GitHub status reporting disabled, missing: {}", ", ".join(missing))
        return None

    owner, _, repo = settings.github_repository.partition("/")
    if not owner or not repo.strip():
        logger.warning("GITHUB_REPOSITORY must be in owner/repo form, got {}", settings.github_repository)
        return None

    config = GitHubReporterConfig(
        owner=owner,
        repo=repo,
        token=settings.github_token,
        sha=settings.github_sha,
        environment=environment,
        pull_request_number=settings.github_pr_number,
        api_url=settings.github_api_url,
    )
    return GitHubDeploymentStatusReporter(config, client=client)
