"""Deployment tool configuration using Pydantic Settings.

This module centralizes runtime configuration for the deployment tool. Values
can be provided via environment variables (preferred) or fall back to the
defaults below. A ``Settings`` instance is intended to be retrieved via
``get_settings`` which caches the object for reuse across the process.

Environment variable prefix: ``PAGES_DEPLOYER_`` (e.g. ``PAGES_DEPLOYER_OUTPUT_DIR``).
The GitHub reporting fields additionally accept the variables provided by
GitHub Actions (``GITHUB_TOKEN``, ``GITHUB_REPOSITORY``, ``GITHUB_SHA``).
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings.

    Attributes map directly to environment variables using the ``PAGES_DEPLOYER_``
    prefix (case-insensitive). For example, ``output_dir`` <- ``PAGES_DEPLOYER_OUTPUT_DIR``.
    """

    # Project layout and external tools
    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Root directory of the project being built and deployed",
    )
    output_dir: str = Field(
        default="dist",
        description="Build output directory, relative to the project root",
    )  # fmt: skip
    package_manager: str = Field(
        default="npm",
        description="Package manager used to run build scripts",
    )  # fmt: skip
    platform_cli: str = Field(
        default="wrangler",
        description="Edge platform CLI used to deploy",
    )  # fmt: skip
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Application log level",
    )

    # Timeouts
    command_timeout_s: float = Field(
        default=600.0,
        gt=0,
        description="Ceiling for build and deploy child processes, in seconds",
    )
    http_timeout_ms: int = Field(
        default=30_000,
        gt=0,
        description="Timeout for verification requests, in milliseconds",
    )

    # Retry policy
    retry_max_attempts: int = Field(default=3, ge=1, description="Attempts per retryable operation")
    retry_base_delay_s: float = Field(default=2.0, ge=0, description="Delay before the second attempt")
    retry_max_delay_s: float = Field(default=30.0, ge=0, description="Upper bound for a single backoff delay")
    retry_backoff_multiplier: float = Field(default=2.0, ge=1, description="Growth factor between delays")

    # Deploy output handling
    success_markers: list[str] = Field(
        default_factory=lambda: ["✨", "Success"],
        description="Output markers that mean a deploy succeeded despite a non-zero exit code",
    )
    custom_domain_suffixes: list[str] = Field(
        default_factory=lambda: ["clubemkt.digital"],
        description="Domain suffixes treated as custom domains when parsing deploy output",
    )

    # GitHub deployment status reporting
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("pages_deployer_github_token", "github_token"),
        description="Token used to report deployment status",
    )
    github_repository: str | None = Field(
        default=None,
        validation_alias=AliasChoices("pages_deployer_github_repository", "github_repository"),
        description="Repository in owner/name form",
    )
    github_sha: str | None = Field(
        default=None,
        validation_alias=AliasChoices("pages_deployer_github_sha", "github_sha"),
        description="Commit being deployed",
    )
    github_pr_number: int | None = Field(
        default=None,
        description="Pull request number, for preview deployments",
    )  # fmt: skip
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )  # fmt: skip

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str:
        """Normalize and validate log level."""
        if v is None:
            return "INFO"

        v_upper = str(v).upper()

        allowed = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR"}
        if v_upper not in allowed:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(sorted(allowed))}")

        return v_upper

    @property
    def output_path(self) -> Path:
        """Absolute path of the build output directory."""
        return self.project_root / self.output_dir

    model_config = SettingsConfigDict(
        env_prefix="PAGES_DEPLOYER_",
        case_sensitive=False,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance.

    The first invocation reads environment variables / .env file; subsequent
    calls reuse the same object to ensure consistent config.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]
