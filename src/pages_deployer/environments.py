"""Environment registry.

Static per-environment settings (domains, platform project names, build and
deploy commands, required variables) consumed by the build orchestrator, the
deployment executor and the verifier. The generators at the bottom are pure
string builders; writing their output to disk is up to the caller.
"""

import os
import re
from collections.abc import Mapping
from enum import StrEnum

from pydantic import BaseModel, Field

from pages_deployer.exceptions import UnknownEnvironmentError


class Environment(StrEnum):
    """Deployment target."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    PREVIEW = "preview"


class Route(BaseModel):
    pattern: str
    custom_domain: bool = False


class EnvironmentConfig(BaseModel):
    """Site-level settings of one environment."""

    model_config = {"frozen": True}

    name: Environment
    domain: str
    supabase_url: str
    supabase_project_id: str
    platform_project_name: str
    custom_domain: str | None = None
    routes: tuple[Route, ...] = ()
    environment_variables: dict[str, str] = Field(default_factory=dict)


class DeploymentEnvironmentConfig(BaseModel):
    """How one environment is built, deployed and verified."""

    model_config = {"frozen": True}

    environment: Environment
    build_script: str
    platform_env: str | None = None
    verification_url: str | None = None
    requires_custom_domain: bool = False

    def build_command(self, package_manager: str = "npm") -> list[str]:
        """Command that builds the site for this environment."""
        return [package_manager, "run", self.build_script]

    def deploy_command(self, output_dir: str = "dist", platform_cli: str = "wrangler") -> list[str]:
        """Command that deploys ``output_dir`` for this environment."""
        command = [platform_cli, "pages", "deploy", output_dir]
        if self.platform_env:
            command += ["--env", self.platform_env]
        return command


class ConfigValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


REQUIRED_ENVIRONMENT_VARIABLES = (
    "VITE_ENVIRONMENT",
    "VITE_APP_DOMAIN",
    "VITE_SUPABASE_URL",
    "VITE_SUPABASE_PROJECT_ID",
    "VITE_SUPABASE_PUBLISHABLE_KEY",
)

PLATFORM_SUBDOMAIN = "pages.dev"

_SUPABASE_URL = "https://ucmedbalujyknisrnudb.supabase.co"
_SUPABASE_PROJECT_ID = "ucmedbalujyknisrnudb"


def _site_variables(environment: Environment, domain: str) -> dict[str, str]:
    # The publishable key is a secret and is read from the process environment.
    return {
        "VITE_ENVIRONMENT": environment.value,
        "VITE_APP_DOMAIN": domain,
        "VITE_SUPABASE_URL": _SUPABASE_URL,
        "VITE_SUPABASE_PROJECT_ID": _SUPABASE_PROJECT_ID,
    }


def _custom_domain_routes(domain: str) -> tuple[Route, ...]:
    return (Route(pattern=domain, custom_domain=True), Route(pattern=f"{domain}/*", custom_domain=True))


ENVIRONMENT_CONFIGS: dict[Environment, EnvironmentConfig] = {
    Environment.DEVELOPMENT: EnvironmentConfig(
        name=Environment.DEVELOPMENT,
        domain="localhost:8080",
        supabase_url=_SUPABASE_URL,
        supabase_project_id=_SUPABASE_PROJECT_ID,
        platform_project_name="agendai-saas-dev",
        environment_variables=_site_variables(Environment.DEVELOPMENT, "localhost:8080"),
    ),
    Environment.STAGING: EnvironmentConfig(
        name=Environment.STAGING,
        domain="staging.agendai.clubemkt.digital",
        supabase_url=_SUPABASE_URL,
        supabase_project_id=_SUPABASE_PROJECT_ID,
        platform_project_name="agendai-saas-staging",
        custom_domain="staging.agendai.clubemkt.digital",
        routes=_custom_domain_routes("staging.agendai.clubemkt.digital"),
        environment_variables=_site_variables(Environment.STAGING, "staging.agendai.clubemkt.digital"),
    ),
    Environment.PRODUCTION: EnvironmentConfig(
        name=Environment.PRODUCTION,
        domain="agendai.clubemkt.digital",
        supabase_url=_SUPABASE_URL,
        supabase_project_id=_SUPABASE_PROJECT_ID,
        platform_project_name="agendai-saas-production",
        custom_domain="agendai.clubemkt.digital",
        routes=_custom_domain_routes("agendai.clubemkt.digital"),
        environment_variables=_site_variables(Environment.PRODUCTION, "agendai.clubemkt.digital"),
    ),
    Environment.PREVIEW: EnvironmentConfig(
        name=Environment.PREVIEW,
        domain="preview.pages.dev",
        supabase_url=_SUPABASE_URL,
        supabase_project_id=_SUPABASE_PROJECT_ID,
        platform_project_name="agendai-saas-preview",
        environment_variables=_site_variables(Environment.PREVIEW, "preview.pages.dev"),
    ),
}

DEPLOYMENT_CONFIGS: dict[Environment, DeploymentEnvironmentConfig] = {
    Environment.DEVELOPMENT: DeploymentEnvironmentConfig(
        environment=Environment.DEVELOPMENT,
        build_script="build:development",
        platform_env="development",
        verification_url="http://localhost:8080",
    ),
    Environment.STAGING: DeploymentEnvironmentConfig(
        environment=Environment.STAGING,
        build_script="build:staging",
        platform_env="staging",
        verification_url="https://staging.agendai.clubemkt.digital",
        requires_custom_domain=True,
    ),
    Environment.PRODUCTION: DeploymentEnvironmentConfig(
        environment=Environment.PRODUCTION,
        build_script="build:production",
        platform_env="production",
        verification_url="https://agendai.clubemkt.digital",
        requires_custom_domain=True,
    ),
    # Preview deploys to the project's default branch alias; its URL is only
    # known once the deploy command reports it.
    Environment.PREVIEW: DeploymentEnvironmentConfig(
        environment=Environment.PREVIEW,
        build_script="build:preview",
    ),
}


def get_supported_environments() -> list[Environment]:
    """Return every supported environment, in declaration order."""
    return list(Environment)


def is_valid_environment(value: str) -> bool:
    """Return True if ``value`` names a supported environment."""
    return value in {env.value for env in Environment}


def _coerce(environment: Environment | str) -> Environment:
    if isinstance(environment, Environment):
        return environment
    if not is_valid_environment(environment):
        raise UnknownEnvironmentError(environment)
    return Environment(environment)


def get_environment_config(environment: Environment | str) -> EnvironmentConfig:
    """Get the site configuration of an environment.

    Raises:
        UnknownEnvironmentError: If the environment is not supported
    """
    return ENVIRONMENT_CONFIGS[_coerce(environment)]


def get_deployment_config(environment: Environment | str) -> DeploymentEnvironmentConfig:
    """Get the deployment configuration of an environment.

    Raises:
        UnknownEnvironmentError: If the environment is not supported
    """
    return DEPLOYMENT_CONFIGS[_coerce(environment)]


def get_current_environment(environ: Mapping[str, str] | None = None) -> Environment:
    """Resolve the environment from ``VITE_ENVIRONMENT`` / ``NODE_ENV``.

    Unrecognized values fall back to development.
    """
    environ = os.environ if environ is None else environ
    value = environ.get("VITE_ENVIRONMENT") or environ.get("NODE_ENV") or Environment.DEVELOPMENT.value
    return Environment(value) if is_valid_environment(value) else Environment.DEVELOPMENT


def resolve_environment_variables(environment: Environment | str, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Table defaults of an environment overlaid with process variables.

    Only the required variable names are taken from ``environ``.
    """
    config = get_environment_config(environment)
    environ = os.environ if environ is None else environ
    variables = dict(config.environment_variables)
    for name in REQUIRED_ENVIRONMENT_VARIABLES:
        if name in environ:
            variables[name] = environ[name]
    return variables


def validate_environment_config(
    environment: Environment | str,
    variables: Mapping[str, str] | None = None,
) -> ConfigValidationResult:
    """Validate an environment's configuration and variables.

    Args:
        environment: Environment to validate
        variables: Variables to check. When omitted, the table defaults overlaid
            with the process environment are used.

    Returns:
        ConfigValidationResult: ``valid`` is False when any required variable is
            missing or blank; each error names the variable.
    """
    errors: list[str] = []
    warnings: list[str] = []

    try:
        config = get_environment_config(environment)
    except UnknownEnvironmentError as e:
        return ConfigValidationResult(valid=False, errors=[f"Failed to load configuration: {e}"])

    if not config.domain:
        errors.append("Domain is required")
    if not config.platform_project_name:
        errors.append("Platform project name is required")

    if config.name in (Environment.PRODUCTION, Environment.STAGING):
        if not config.custom_domain:
            warnings.append(f"Custom domain not configured for {config.name}")
        if not config.routes:
            warnings.append(f"No routes configured for {config.name}")

    if variables is None:
        variables = resolve_environment_variables(config.name)

    for name in REQUIRED_ENVIRONMENT_VARIABLES:
        value = variables.get(name)
        if value is None or not value.strip():
            errors.append(f"Missing environment variable: {name}")

    return ConfigValidationResult(valid=not errors, errors=errors, warnings=warnings)


def url_patterns(environment: Environment | str) -> list[re.Pattern[str]]:
    """URL patterns a successful deployment of this environment may report.

    Environments with a custom domain only accept that domain and their own
    platform project subdomains; the others accept any platform subdomain.
    """
    config = get_environment_config(environment)
    project_subdomain = re.compile(
        rf"^https://([a-z0-9-]+\.)?{re.escape(config.platform_project_name)}\.{re.escape(PLATFORM_SUBDOMAIN)}(/.*)?$"
    )
    if config.custom_domain:
        return [re.compile(rf"^https://{re.escape(config.custom_domain)}(/.*)?$"), project_subdomain]
    return [project_subdomain, re.compile(rf"^https://[a-z0-9-]+\.{re.escape(PLATFORM_SUBDOMAIN)}(/.*)?$")]


def matches_expected_url(environment: Environment | str, url: str) -> bool:
    """Return True if ``url`` matches one of ``url_patterns(environment)``."""
    return any(pattern.match(url) for pattern in url_patterns(environment))


def generate_wrangler_env_config(environment: Environment | str) -> str:
    """Generate the ``[env.<name>]`` section of the platform config file."""
    config = get_environment_config(environment)
    env_name = config.name.value

    lines = [f"[env.{env_name}]", f'name = "{config.platform_project_name}"']
    if config.routes:
        lines.append("routes = [")
        for route in config.routes:
            entry = f'  {{ pattern = "{route.pattern}"'
            if route.custom_domain:
                entry += ", custom_domain = true"
            lines.append(entry + " },")
        lines.append("]")

    lines.append("")
    lines.append(f"[env.{env_name}.vars]")
    for key, value in config.environment_variables.items():
        lines.append(f'{key} = "{value}"')

    return "\n".join(lines) + "\n"


def generate_env_file_content(environment: Environment | str, variables: Mapping[str, str] | None = None) -> str:
    """Generate ``.env.<name>`` content as ``KEY=value`` lines.

    Args:
        environment: Environment to generate for
        variables: Extra or overriding variables (e.g. the publishable key)
    """
    config = get_environment_config(environment)
    env_name = config.name.value

    merged = dict(config.environment_variables)
    if variables:
        merged.update(variables)

    lines = [
        f"# {env_name.capitalize()} Environment Configuration",
        f"# This file is used when deploying to {env_name} environment",
        "",
    ]
    lines.extend(f"{key}={value}" for key, value in merged.items())
    return "\n".join(lines) + "\n"
