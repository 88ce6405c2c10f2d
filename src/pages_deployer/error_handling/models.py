"""Data models for error handling, retry and rollback."""

from enum import StrEnum

import arrow
from pydantic import BaseModel, Field

from pages_deployer.exceptions import ErrorKind


class RecoveryActionType(StrEnum):
    RETRY = "retry"
    ROLLBACK = "rollback"
    MANUAL = "manual"
    SKIP = "skip"


class RecoveryAction(BaseModel):
    """A suggested next step after a failure."""

    model_config = {"use_enum_values": True}

    type: RecoveryActionType
    description: str
    command: str | None = None
    automated: bool = False


class RollbackInfo(BaseModel):
    previous_deployment_id: str | None = None
    previous_url: str | None = None
    rollback_available: bool = False
    rollback_command: str | None = None


class RollbackOutcome(BaseModel):
    success: bool
    message: str
    previous_url: str | None = None
    previous_deployment_id: str | None = None
    command: str | None = None


class DeploymentRecord(BaseModel):
    """One entry of the deployment ledger."""

    id: str
    url: str
    timestamp: str = Field(default_factory=lambda: arrow.utcnow().isoformat())
    success: bool


class RetryState(BaseModel):
    """Progress of a retryable operation, logged before every backoff sleep."""

    operation: str
    attempt: int
    max_attempts: int
    delay_s: float


class ClassifiedError(BaseModel):
    """A failure with its classification."""

    model_config = {"use_enum_values": True}

    kind: ErrorKind
    code: str
    message: str
    stage: str
    retryable: bool
    recoverable: bool = True
    timestamp: str = Field(default_factory=lambda: arrow.utcnow().isoformat())
    raw_output: str | None = None


class ErrorHandlingResult(BaseModel):
    error: ClassifiedError
    report: str
    recovery_actions: list[RecoveryAction] = Field(default_factory=list)
    rollback_info: RollbackInfo
