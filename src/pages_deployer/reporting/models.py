"""Data models for deployment status reporting."""

from enum import StrEnum

from pydantic import BaseModel

from pages_deployer.environments import Environment


class StatusState(StrEnum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


class StatusUpdate(BaseModel):
    """A deployment status notification."""

    model_config = {"use_enum_values": True}

    status: StatusState
    description: str
    url: str | None = None
    preview_url: str | None = None
    build_time_ms: float | None = None
    deploy_time_ms: float | None = None
    error: str | None = None


class GitHubReporterConfig(BaseModel):
    owner: str
    repo: str
    token: str
    sha: str
    environment: Environment
    pull_request_number: int | None = None
    api_url: str = "https://api.github.com"

    @property
    def repository_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.owner}/{self.repo}"
