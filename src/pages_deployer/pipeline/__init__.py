"""Asynchronous stage pipeline.

This module provides a small stage/check pipeline:
- Pipeline stages group related checks
- Sequential execution with proper failure handling
- Critical stages and checks control execution flow
- Hierarchical results with warnings surfaced per stage

The pipeline runtime is decoupled from specific check implementations,
which live next to the component that uses them (see ``pages_deployer.build``).
"""

from .base import PipelineCheck
from .builder import PipelineBuilder
from .enums import CheckStatus
from .models import CheckResult, PipelineResult, StageResult
from .pipeline import Pipeline
from .stage import PipelineStage

__all__ = [
    # Core models
    "CheckStatus",
    "CheckResult",
    "PipelineCheck",
    "PipelineResult",
    "StageResult",
    # Pipeline components
    "PipelineStage",
    "Pipeline",
    "PipelineBuilder",
]
