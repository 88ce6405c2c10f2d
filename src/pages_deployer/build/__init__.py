"""Static-site build orchestration."""

from .assets import AssetFile, BuildAssets, analyze_build_assets, format_file_size
from .models import BuildExecutionResult, BuildOrchestrationResult, BuildStage, BuildValidationResult
from .orchestrator import BuildOrchestrator

__all__ = [
    "AssetFile",
    "BuildAssets",
    "BuildExecutionResult",
    "BuildOrchestrationResult",
    "BuildOrchestrator",
    "BuildStage",
    "BuildValidationResult",
    "analyze_build_assets",
    "format_file_size",
]
