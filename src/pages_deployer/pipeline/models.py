"""Data models for the stage pipeline.

This module contains Pydantic models used throughout the pipeline
to avoid circular dependencies between components.
"""

from typing import Any

import arrow
from pydantic import BaseModel, Field

from .enums import CheckStatus


class CheckResult(BaseModel):
    """Result of an individual pipeline check."""

    model_config = {"use_enum_values": True}

    status: CheckStatus
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    check_name: str
    stage_name: str | None = None
    executed_at: str | None = None  # ISO 8601 UTC timestamp
    execution_time_ms: float | None = None


class StageResult(BaseModel):
    """Result of a pipeline stage (group of related checks)."""

    model_config = {"use_enum_values": True}

    stage_name: str
    status: CheckStatus
    message: str
    check_results: list[CheckResult] = Field(default_factory=list)
    executed_at: str | None = None  # ISO 8601 UTC timestamp
    execution_time_ms: float | None = None
    total_checks: int = 0
    successful_checks: int = 0
    warning_checks: int = 0
    failed_checks: int = 0
    skipped_checks: int = 0

    def warnings(self) -> list[str]:
        """Collect warning messages raised by checks of this stage.

        A check may carry several warnings in ``details["warnings"]``; otherwise
        its message is the warning.
        """
        collected: list[str] = []
        for check_result in self.check_results:
            if check_result.status != CheckStatus.WARNING:
                continue
            collected.extend(check_result.details.get("warnings") or [check_result.message])
        return collected

    def errors(self) -> list[str]:
        """Collect messages of failed checks, one per reported problem."""
        collected: list[str] = []
        for check_result in self.check_results:
            if check_result.status != CheckStatus.FAILED:
                continue
            collected.extend(check_result.details.get("errors") or [check_result.message])
        return collected


class PipelineResult(BaseModel):
    """Complete result of a pipeline execution."""

    model_config = {"use_enum_values": True}

    overall_status: CheckStatus
    message: str
    stage_results: list[StageResult] = Field(default_factory=list)
    failed_stage: str | None = None
    executed_at: str = Field(default_factory=lambda: arrow.utcnow().isoformat())
    total_execution_time_ms: float | None = None
    total_stages: int = 0
    successful_stages: int = 0
    failed_stages: int = 0
    skipped_stages: int = 0
    total_checks: int = 0
    successful_checks: int = 0
    failed_checks: int = 0
    skipped_checks: int = 0
