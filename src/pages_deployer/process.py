"""Child process execution for build and deploy commands.

Commands run through ``asyncio`` subprocesses with a ceiling on their run time.
Failures are raised as ``DeploymentError`` carrying the combined output, so the
error handler never has to inspect process objects.
"""

import asyncio
import errno
import shlex
from pathlib import Path

import arrow
from loguru import logger
from pydantic import BaseModel

from pages_deployer.exceptions import DeploymentError, ErrorKind


class CommandResult(BaseModel):
    """Outcome of a finished child process."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def format_command(command: list[str]) -> str:
    return shlex.join(command)


def command_start_error(command: list[str], error: OSError) -> DeploymentError:
    """Classify a failure to start ``command``.

    A missing or non-executable program is a ``DEPENDENCY`` error; any other
    operating system error keeps the ``UNKNOWN`` kind.
    """
    if error.errno == errno.ENOENT or isinstance(error, FileNotFoundError):
        return DeploymentError(f"Command not found: {command[0]}", kind=ErrorKind.DEPENDENCY)
    if error.errno == errno.EACCES or isinstance(error, PermissionError):
        return DeploymentError(f"Command not executable: {command[0]}", kind=ErrorKind.DEPENDENCY)
    return DeploymentError(f"Command could not be started: {format_command(command)}: {error}")


class CommandRunner:
    """Runs external commands in a working directory with a timeout."""

    def __init__(self, cwd: Path | None = None, timeout_s: float = 600.0):
        self.cwd = cwd
        self.timeout_s = timeout_s

    async def run(self, command: list[str], check: bool = True, timeout_s: float | None = None) -> CommandResult:
        """Run ``command`` and capture its output.

        Args:
            command: Program and arguments
            check: Raise on a non-zero exit code
            timeout_s: Override of the runner's ceiling

        Returns:
            CommandResult: Exit code and captured output

        Raises:
            DeploymentError: ``DEPENDENCY`` if the program does not exist or is
                not executable,
                ``TIMEOUT`` if it exceeds the ceiling, and, when ``check`` is set,
                an unclassified error for a non-zero exit code.
        """
        timeout_s = timeout_s or self.timeout_s
        display = format_command(command)
        logger.debug("Running command: {}", display)
        start_time = arrow.utcnow().float_timestamp

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=self.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise command_start_error(command, e) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_s)
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise DeploymentError(f"Command timed out after {timeout_s:.0f}s: {display}", kind=ErrorKind.TIMEOUT) from e

        result = CommandResult(
            command=command,
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            duration_ms=(arrow.utcnow().float_timestamp - start_time) * 1000,
        )
        logger.debug("Command exited with {} in {:.0f}ms", result.returncode, result.duration_ms)

        if check and not result.ok:
            raise DeploymentError(
                f"Command failed with exit code {result.returncode}: {display}",
                raw_output=result.output,
            )
        return result
