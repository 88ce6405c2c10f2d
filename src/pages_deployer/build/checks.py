"""Pipeline checks run by the build orchestrator.

Each check covers one precondition or step of the build and reports through
the stage pipeline. Failed checks carry their problems in
``details["errors"]`` and warnings in ``details["warnings"]`` so the stage
result can be flattened into human-readable lists.
"""

import asyncio
import json
import shutil
import tomllib
from pathlib import Path

import arrow
from loguru import logger

from pages_deployer.constants import (
    BUILD_TOOL_CONFIG_FILES,
    ENTRY_DOCUMENT,
    MANIFEST_FILE,
    PLATFORM_CONFIG_FILE,
    PLATFORM_CONFIG_REQUIRED_KEYS,
    SOURCE_DIR,
)
from pages_deployer.environments import Environment
from pages_deployer.exceptions import DeploymentError
from pages_deployer.pipeline import CheckResult, PipelineCheck
from pages_deployer.process import CommandRunner, format_command

from .assets import analyze_build_assets, asset_warnings


class ManifestExistsCheck(PipelineCheck):
    def __init__(self, project_root: Path, name: str = "manifest", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.project_root = project_root

    async def _execute(self) -> CheckResult:
        manifest = self.project_root / MANIFEST_FILE
        if not manifest.is_file():
            return self.failed(f"{MANIFEST_FILE} not found", {"path": str(manifest)})
        return self.success(f"{MANIFEST_FILE} found", {"path": str(manifest)})


class BuildToolConfigCheck(PipelineCheck):
    """The bundler configuration file must exist (any supported variant)."""

    def __init__(self, project_root: Path, name: str = "build_tool_config", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.project_root = project_root

    async def _execute(self) -> CheckResult:
        for candidate in BUILD_TOOL_CONFIG_FILES:
            if (self.project_root / candidate).is_file():
                return self.success(f"{candidate} found", {"path": candidate})

        expected = ", ".join(BUILD_TOOL_CONFIG_FILES)
        return self.failed(
            f"{BUILD_TOOL_CONFIG_FILES[0]} not found (expected one of: {expected})",
            {"expected": list(BUILD_TOOL_CONFIG_FILES)},
        )


class SourceDirectoryCheck(PipelineCheck):
    def __init__(self, project_root: Path, name: str = "source_directory", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.project_root = project_root

    async def _execute(self) -> CheckResult:
        if not (self.project_root / SOURCE_DIR).is_dir():
            return self.failed(f"{SOURCE_DIR} directory not found")
        return self.success(f"{SOURCE_DIR} directory found")


class BuildScriptDeclaredCheck(PipelineCheck):
    """The environment's build script must be declared in the manifest."""

    def __init__(self, project_root: Path, script: str, name: str = "build_script", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.project_root = project_root
        self.script = script

    async def _execute(self) -> CheckResult:
        manifest = self.project_root / MANIFEST_FILE
        if not manifest.is_file():
            # Reported by ManifestExistsCheck
            return self.not_applicable(f"{MANIFEST_FILE} not available, build script not checked")

        try:
            package = json.loads(manifest.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            return self.failed(f"Failed to parse {MANIFEST_FILE}: {e}")

        scripts = package.get("scripts") if isinstance(package, dict) else None
        if not isinstance(scripts, dict) or not scripts.get(self.script):
            return self.failed(f'Build script "{self.script}" not found in {MANIFEST_FILE}', {"script": self.script})

        return self.success(f'Build script "{self.script}" declared', {"script": self.script, "command": scripts[self.script]})


class CleanOutputCheck(PipelineCheck):
    """Remove the previous build output.

    A directory that cannot be removed is reported as a warning; the build
    proceeds on top of it.
    """

    def __init__(self, output_path: Path, dry_run: bool = False, name: str = "clean_output", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.output_path = output_path
        self.dry_run = dry_run

    async def _execute(self) -> CheckResult:
        if not self.output_path.exists():
            return self.success("No previous build output to clean")

        if self.dry_run:
            logger.info("[DRY RUN] Would remove {}", self.output_path)
            return self.not_applicable(f"Dry run: {self.output_path.name} not removed")

        try:
            await asyncio.to_thread(shutil.rmtree, self.output_path)
        except OSError as e:
            return self.warning(f"Failed to clean build output: {e}", {"path": str(self.output_path)})

        return self.success(f"Removed previous build output {self.output_path.name}")


class BuildCommandCheck(PipelineCheck):
    """Run the environment's build command.

    Details carry ``command``, ``output`` and ``build_time_ms``; on failure
    also ``error`` and ``kind`` of the raised ``DeploymentError``.
    """

    def __init__(
        self,
        command: list[str],
        runner: CommandRunner,
        timeout_s: float | None = None,
        dry_run: bool = False,
        name: str = "build_command",
        is_critical: bool = True,
    ):
        super().__init__(name, is_critical)
        self.command = command
        self.runner = runner
        self.timeout_s = timeout_s
        self.dry_run = dry_run

    async def _execute(self) -> CheckResult:
        display = format_command(self.command)
        if self.dry_run:
            logger.info("[DRY RUN] Would execute: {}", display)
            return self.success("Dry run: build simulated", {"command": display, "build_time_ms": 0.0, "dry_run": True})

        logger.info("Executing build command: {}", display)
        start_time = arrow.utcnow().float_timestamp
        try:
            result = await self.runner.run(self.command, timeout_s=self.timeout_s)
        except DeploymentError as e:
            return self.failed(
                f"Build execution failed: {e.message}",
                {
                    "command": display,
                    "error": e.message,
                    "kind": e.kind,
                    "output": e.raw_output,
                    "build_time_ms": 0.0,
                },
            )

        build_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000
        return self.success(
            f"Build completed successfully in {build_time_ms:.0f}ms",
            {"command": display, "output": result.output, "build_time_ms": build_time_ms},
        )


class OutputDirectoryCheck(PipelineCheck):
    def __init__(self, output_path: Path, name: str = "output_directory", is_critical: bool = True):
        super().__init__(name, is_critical)
        self.output_path = output_path

    async def _execute(self) -> CheckResult:
        if not self.output_path.is_dir():
            return self.failed(f'Build output directory "{self.output_path.name}" not found')
        return self.success(f'Build output directory "{self.output_path.name}" found')


class EntryDocumentCheck(PipelineCheck):
    """The entry HTML document must exist; missing markers are warnings."""

    def __init__(self, output_path: Path, name: str = "entry_document", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.output_path = output_path

    async def _execute(self) -> CheckResult:
        entry = self.output_path / ENTRY_DOCUMENT
        if not entry.is_file():
            return self.failed(f"{ENTRY_DOCUMENT} not found in build output")

        content = entry.read_text(encoding="utf-8", errors="replace")
        warnings = []
        if '<div id="root">' not in content:
            warnings.append(f"{ENTRY_DOCUMENT} may not contain expected root mount element")
        if 'type="module"' not in content:
            warnings.append(f"{ENTRY_DOCUMENT} may not be configured for ES modules")

        if warnings:
            return self.warning(warnings[0], {"warnings": warnings})
        return self.success(f"{ENTRY_DOCUMENT} looks valid")


class AssetAnalysisCheck(PipelineCheck):
    """Classify the build output and flag optimization problems.

    Never fails; ``details["assets"]`` holds the serialized ``BuildAssets``.
    """

    def __init__(self, output_path: Path, environment: Environment, name: str = "asset_analysis", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.output_path = output_path
        self.environment = environment

    async def _execute(self) -> CheckResult:
        assets = await asyncio.to_thread(analyze_build_assets, self.output_path)
        warnings = asset_warnings(assets, self.environment)
        details = {"assets": assets.model_dump(), "warnings": warnings}

        summary = f"Analyzed {assets.total_files} files"
        if warnings:
            return self.warning(f"{summary} with {len(warnings)} warning(s)", details)
        return self.success(summary, details)


class DryRunSkipCheck(PipelineCheck):
    """Placeholder for stages that inspect real files during a dry run."""

    def __init__(self, name: str, message: str):
        super().__init__(name, is_critical=False)
        self.message = message

    async def _execute(self) -> CheckResult:
        return self.not_applicable(self.message)


class PlatformConfigCheck(PipelineCheck):
    """The platform project file must declare the required keys.

    Deploys pass ``--env <platform_env>``, so that environment's section must
    exist too. An output directory other than the configured one is a warning.
    """

    def __init__(
        self,
        project_root: Path,
        platform_env: str | None,
        output_dir: str,
        name: str = "platform_config",
        is_critical: bool = False,
    ):
        super().__init__(name, is_critical)
        self.project_root = project_root
        self.platform_env = platform_env
        self.output_dir = output_dir

    async def _execute(self) -> CheckResult:
        config_path = self.project_root / PLATFORM_CONFIG_FILE
        if not config_path.is_file():
            return self.failed(f"{PLATFORM_CONFIG_FILE} configuration file not found", {"path": str(config_path)})

        try:
            config = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            return self.failed(f"Failed to parse {PLATFORM_CONFIG_FILE}: {e}")

        errors = []
        missing = [key for key in PLATFORM_CONFIG_REQUIRED_KEYS if key not in config]
        if missing:
            errors.append(f"Missing required configuration in {PLATFORM_CONFIG_FILE}: {', '.join(missing)}")

        sections = config.get("env")
        if self.platform_env and not (isinstance(sections, dict) and self.platform_env in sections):
            errors.append(f"Environment section [env.{self.platform_env}] not found in {PLATFORM_CONFIG_FILE}")

        if errors:
            return self.failed(errors[0], {"errors": errors})

        configured_output = config["pages_build_output_dir"]
        if configured_output != self.output_dir:
            return self.warning(
                f'Build output directory is configured as "{configured_output}", expected "{self.output_dir}"',
                {"configured": configured_output, "expected": self.output_dir},
            )
        return self.success(f"{PLATFORM_CONFIG_FILE} configuration is valid")


class PlatformCliInstalledCheck(PipelineCheck):
    """``<cli> --version`` must succeed."""

    def __init__(self, platform_cli: str, runner: CommandRunner, name: str = "platform_cli", is_critical: bool = True):
        super().__init__(name, is_critical)
        self.platform_cli = platform_cli
        self.runner = runner

    async def _execute(self) -> CheckResult:
        try:
            result = await self.runner.run([self.platform_cli, "--version"])
        except DeploymentError as e:
            return self.failed(
                f"{self.platform_cli} CLI is not installed or not accessible. "
                f"Please install it with: npm install -g {self.platform_cli}",
                {"error": e.message, "kind": e.kind},
            )

        version = result.stdout.strip()
        logger.debug("{} version: {}", self.platform_cli, version)
        return self.success(f"{self.platform_cli} version: {version}", {"version": version})


class PlatformAuthenticationCheck(PipelineCheck):
    """``<cli> whoami`` must report a logged-in account.

    Some CLI versions exit 0 when logged out, so the output is checked too.
    """

    def __init__(self, platform_cli: str, runner: CommandRunner, name: str = "platform_auth", is_critical: bool = False):
        super().__init__(name, is_critical)
        self.platform_cli = platform_cli
        self.runner = runner

    async def _execute(self) -> CheckResult:
        message = f"{self.platform_cli} is not authenticated. Please run: {self.platform_cli} login"
        try:
            result = await self.runner.run([self.platform_cli, "whoami"])
        except DeploymentError as e:
            return self.failed(message, {"error": e.message, "kind": e.kind, "output": e.raw_output})

        if "not authenticated" in result.output.lower():
            return self.failed(message, {"output": result.output})
        return self.success(f"Authenticated with {self.platform_cli}", {"output": result.output})
