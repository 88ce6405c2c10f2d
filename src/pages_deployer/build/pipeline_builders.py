"""Pipeline stage builders for the build orchestrator.

Each function adds one stage to a ``PipelineBuilder``. All stages are
critical: a failing stage stops the run and the remaining stages are
reported as skipped.
"""

from pathlib import Path

from pages_deployer.constants import STAGE_BUILD, STAGE_CLEANUP, STAGE_PLATFORM_VALIDATION, STAGE_PRE_VALIDATION, STAGE_VALIDATION
from pages_deployer.environments import Environment
from pages_deployer.pipeline import PipelineBuilder
from pages_deployer.process import CommandRunner

from .checks import (
    AssetAnalysisCheck,
    BuildCommandCheck,
    BuildScriptDeclaredCheck,
    BuildToolConfigCheck,
    CleanOutputCheck,
    DryRunSkipCheck,
    EntryDocumentCheck,
    ManifestExistsCheck,
    OutputDirectoryCheck,
    PlatformAuthenticationCheck,
    PlatformCliInstalledCheck,
    PlatformConfigCheck,
    SourceDirectoryCheck,
)


def add_pre_validation_stage(builder: PipelineBuilder, project_root: Path, build_script: str) -> PipelineBuilder:
    """Add project layout validation.

    Runs every check (no fail-fast) so that all missing pieces are reported
    at once.
    """
    (
        builder.add_stage(
            name=STAGE_PRE_VALIDATION,
            description="Validates the project layout before building",
            is_critical=True,
            fail_fast=False,
        )
        .add_check(ManifestExistsCheck(project_root))
        .add_check(BuildScriptDeclaredCheck(project_root, build_script))
        .add_check(BuildToolConfigCheck(project_root))
        .add_check(SourceDirectoryCheck(project_root))
    )
    return builder


def add_cleanup_stage(builder: PipelineBuilder, output_path: Path, dry_run: bool = False) -> PipelineBuilder:
    builder.add_stage(
        name=STAGE_CLEANUP,
        description="Removes the previous build output",
        is_critical=True,
    ).add_check(CleanOutputCheck(output_path, dry_run=dry_run))
    return builder


def add_build_stage(
    builder: PipelineBuilder,
    command: list[str],
    runner: CommandRunner,
    timeout_s: float | None = None,
    dry_run: bool = False,
) -> PipelineBuilder:
    builder.add_stage(
        name=STAGE_BUILD,
        description="Runs the environment build command",
        is_critical=True,
    ).add_check(BuildCommandCheck(command, runner, timeout_s=timeout_s, dry_run=dry_run))
    return builder


def add_validation_stage(
    builder: PipelineBuilder,
    output_path: Path,
    environment: Environment,
    dry_run: bool = False,
) -> PipelineBuilder:
    """Add build output validation.

    In a dry run nothing was built, so the stage only records that
    validation was skipped.
    """
    stage = builder.add_stage(
        name=STAGE_VALIDATION,
        description="Validates the build output and analyzes assets",
        is_critical=True,
        fail_fast=True,
    )
    if dry_run:
        stage.add_check(DryRunSkipCheck("output_validation", "Dry run: build output validation skipped"))
        return builder

    stage.add_checks(
        [
            OutputDirectoryCheck(output_path),
            EntryDocumentCheck(output_path),
            AssetAnalysisCheck(output_path, environment),
        ]
    )
    return builder


def add_platform_validation_stage(
    builder: PipelineBuilder,
    project_root: Path,
    platform_cli: str,
    runner: CommandRunner,
    platform_env: str | None,
    output_dir: str,
) -> PipelineBuilder:
    """Add edge platform readiness checks: project file, CLI and login.

    The project file is checked first so its problems are reported even when
    the CLI is missing; a missing CLI stops the stage before the login check.
    """
    builder.add_stage(
        name=STAGE_PLATFORM_VALIDATION,
        description="Validates the edge platform CLI and project configuration",
        is_critical=True,
        fail_fast=False,
    ).add_checks(
        [
            PlatformConfigCheck(project_root, platform_env, output_dir),
            PlatformCliInstalledCheck(platform_cli, runner),
            PlatformAuthenticationCheck(platform_cli, runner),
        ]
    )
    return builder
