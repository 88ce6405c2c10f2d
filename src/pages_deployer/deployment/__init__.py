"""Build, deploy and verify orchestration."""

from .executor import DeploymentExecutor
from .models import (
    BuildResult,
    CompleteDeploymentResult,
    DeploymentResult,
    DeploymentStage,
    DeploymentState,
    DeploymentStatus,
)
from .output_parser import ParsedDeploymentOutput, parse_deployment_output

__all__ = [
    "BuildResult",
    "CompleteDeploymentResult",
    "DeploymentExecutor",
    "DeploymentResult",
    "DeploymentStage",
    "DeploymentState",
    "DeploymentStatus",
    "ParsedDeploymentOutput",
    "parse_deployment_output",
]
