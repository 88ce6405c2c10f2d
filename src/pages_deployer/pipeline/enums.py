"""Enums for the stage pipeline.

This module contains basic enums to avoid circular dependencies.
"""

from enum import StrEnum


class CheckStatus(StrEnum):
    """Status of individual checks or pipeline stages."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    WARNING = "warning"
    FAILED = "failed"
    SKIPPED = "skipped"
    NOT_APPLICABLE = "not_applicable"
