"""Data models for the build orchestrator."""

from enum import StrEnum

from pydantic import BaseModel, Field

from pages_deployer.constants import STAGE_BUILD, STAGE_CLEANUP, STAGE_INITIALIZATION, STAGE_PRE_VALIDATION, STAGE_VALIDATION
from pages_deployer.environments import Environment
from pages_deployer.exceptions import ErrorKind

from .assets import BuildAssets


class BuildStage(StrEnum):
    """Stage a build orchestration reached, in execution order."""

    INITIALIZATION = STAGE_INITIALIZATION
    PRE_VALIDATION = STAGE_PRE_VALIDATION
    CLEANUP = STAGE_CLEANUP
    BUILD = STAGE_BUILD
    VALIDATION = STAGE_VALIDATION


class BuildExecutionResult(BaseModel):
    success: bool
    build_time_ms: float = 0.0
    command: str | None = None
    output: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None


class BuildValidationResult(BaseModel):
    success: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    assets: BuildAssets = Field(default_factory=BuildAssets)


class BuildOrchestrationResult(BaseModel):
    """Outcome of a full pre-validate, clean, build, validate run.

    ``stage`` is the last stage reached: the failing stage on failure,
    ``validation`` on success.
    """

    model_config = {"use_enum_values": True}

    success: bool = False
    stage: BuildStage = BuildStage.INITIALIZATION
    environment: Environment
    build_time_ms: float = 0.0
    validation_time_ms: float = 0.0
    total_time_ms: float = 0.0
    assets: BuildAssets | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    build_output: str | None = None
    error_kind: ErrorKind | None = None
