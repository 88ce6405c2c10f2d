"""Shared fixtures: isolated settings, fake command runners and project trees."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from pages_deployer.exceptions import DeploymentError
from pages_deployer.process import CommandResult, format_command
from pages_deployer.settings import Settings


class FakeRunner:
    """Stands in for ``CommandRunner``; records commands instead of running them.

    ``results`` are consumed in order; an exception in the list is raised.
    Once exhausted every command succeeds with empty output.
    """

    def __init__(
        self,
        results: list[CommandResult | Exception] | None = None,
        on_run: Callable[[list[str]], None] | None = None,
    ):
        self.results = list(results or [])
        self.on_run = on_run
        self.calls: list[list[str]] = []

    async def run(self, command: list[str], check: bool = True, timeout_s: float | None = None) -> CommandResult:
        self.calls.append(command)
        if self.on_run:
            self.on_run(command)

        outcome = self.results.pop(0) if self.results else CommandResult(command=command, returncode=0)
        if isinstance(outcome, Exception):
            raise outcome
        if check and not outcome.ok:
            raise DeploymentError(
                f"Command failed with exit code {outcome.returncode}: {format_command(command)}",
                raw_output=outcome.output,
            )
        return outcome


def command_result(returncode: int = 0, stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(command=["fake"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    return FakeRunner


@pytest.fixture
def make_result() -> Callable[..., CommandResult]:
    return command_result


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temporary project, with GitHub reporting unset."""
    return Settings(
        _env_file=None,
        project_root=tmp_path,
        github_token=None,
        github_repository=None,
        github_sha=None,
    )


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project tree that passes pre-build validation for every environment."""
    scripts = {f"build:{env}": f"vite build --mode {env}" for env in ("development", "staging", "production", "preview")}
    (tmp_path / "package.json").write_text(json.dumps({"name": "site", "scripts": scripts}), encoding="utf-8")
    (tmp_path / "vite.config.ts").write_text("export default {}\n", encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.tsx").write_text("console.log('app')\n", encoding="utf-8")
    return tmp_path


INDEX_HTML = '<!DOCTYPE html><html><head><script type="module" src="/assets/index-DiwrgTda.js"></script></head><body><div id="root"></div></body></html>'


def write_build_output(output_path: Path) -> None:
    """Write a small, well-formed build output."""
    assets = output_path / "assets"
    assets.mkdir(parents=True, exist_ok=True)
    (output_path / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (assets / "index-DiwrgTda.js").write_text("console.log(1)", encoding="utf-8")
    (assets / "index-B3kL9xQz.css").write_text("body{margin:0}", encoding="utf-8")
    (output_path / "favicon.ico").write_bytes(b"\x00" * 16)


@pytest.fixture
def build_output_writer(settings: Settings) -> Callable[[list[str]], None]:
    """``on_run`` hook that writes build output when the build command runs."""

    def on_run(command: list[str]) -> None:
        if "run" in command:
            write_build_output(settings.output_path)

    return on_run
