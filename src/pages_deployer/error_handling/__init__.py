"""Retry, rollback and recovery guidance for deployment failures."""

from .classifier import classify_error, error_code, is_retryable, match_kind
from .handler import DeploymentErrorHandler
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

__all__ = [
    "ClassifiedError",
    "DeploymentErrorHandler",
    "DeploymentLedger",
    "DeploymentRecord",
    "ErrorHandlingResult",
    "RecoveryAction",
    "RecoveryActionType",
    "RetryPolicy",
    "RetryState",
    "RollbackInfo",
    "RollbackOutcome",
    "classify_error",
    "error_code",
    "is_retryable",
    "match_kind",
]
