"""Deployment status reporting."""

from .github import COMMENT_MARKER, GitHubDeploymentStatusReporter, StatusReporter, create_reporter_from_settings
from .models import GitHubReporterConfig, StatusState, StatusUpdate

__all__ = [
    "COMMENT_MARKER",
    "GitHubDeploymentStatusReporter",
    "GitHubReporterConfig",
    "StatusReporter",
    "StatusState",
    "StatusUpdate",
    "create_reporter_from_settings",
]
