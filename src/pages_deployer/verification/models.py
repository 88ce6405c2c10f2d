"""Data models for post-deployment verification."""

from typing import Any

from pydantic import BaseModel, Field


class VerificationCheck(BaseModel):
    """Outcome of one verification check."""

    name: str
    success: bool
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    duration_ms: float = 0.0


class VerificationSummary(BaseModel):
    passed: int = 0
    failed: int = 0
    total: int = 0


class VerificationResult(BaseModel):
    success: bool
    checks: list[VerificationCheck] = Field(default_factory=list)
    summary: VerificationSummary = Field(default_factory=VerificationSummary)


class VerificationOptions(BaseModel):
    url: str
    skip_spa_routing: bool = False
    skip_asset_optimization: bool = False
