"""Data models for the deployment executor."""

from enum import StrEnum

import arrow
from pydantic import BaseModel, Field

from pages_deployer.build import BuildAssets
from pages_deployer.environments import Environment
from pages_deployer.error_handling import RecoveryAction, RollbackInfo
from pages_deployer.verification import VerificationResult


class DeploymentStage(StrEnum):
    BUILD = "build"
    DEPLOY = "deploy"


class BuildResult(BaseModel):
    success: bool
    build_time_ms: float = 0.0
    output_directory: str | None = None
    error: str | None = None
    assets: BuildAssets | None = None
    warnings: list[str] = Field(default_factory=list)
    error_report: str | None = None
    recovery_actions: list[RecoveryAction] = Field(default_factory=list)


class DeploymentResult(BaseModel):
    success: bool
    deploy_time_ms: float = 0.0
    url: str | None = None
    preview_url: str | None = None
    deployment_id: str | None = None
    error: str | None = None
    error_report: str | None = None
    recovery_actions: list[RecoveryAction] = Field(default_factory=list)
    rollback_info: RollbackInfo | None = None


class CompleteDeploymentResult(BaseModel):
    """Outcome of a build, deploy and optional verification run.

    ``stage`` names the failing stage and is unset on success. Verification
    is attached as-is and never changes ``success``.
    """

    model_config = {"use_enum_values": True}

    success: bool
    environment: Environment
    build_time_ms: float = 0.0
    deploy_time_ms: float = 0.0
    total_time_ms: float = 0.0
    url: str | None = None
    preview_url: str | None = None
    deployment_id: str | None = None
    stage: DeploymentStage | None = None
    error: str | None = None
    error_report: str | None = None
    recovery_actions: list[RecoveryAction] = Field(default_factory=list)
    rollback_info: RollbackInfo | None = None
    verification: VerificationResult | None = None


class DeploymentState(StrEnum):
    ACTIVE = "active"
    UNKNOWN = "unknown"
    ERROR = "error"


class DeploymentStatus(BaseModel):
    model_config = {"use_enum_values": True}

    id: str
    status: DeploymentState
    timestamp: str = Field(default_factory=lambda: arrow.utcnow().isoformat())
    error: str | None = None
