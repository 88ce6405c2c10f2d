"""Tests for the environment registry."""

import pytest

from pages_deployer.environments import (
    REQUIRED_ENVIRONMENT_VARIABLES,
    Environment,
    generate_env_file_content,
    generate_wrangler_env_config,
    get_current_environment,
    get_deployment_config,
    get_environment_config,
    get_supported_environments,
    is_valid_environment,
    matches_expected_url,
    resolve_environment_variables,
    validate_environment_config,
)
from pages_deployer.exceptions import UnknownEnvironmentError


def full_variables(environment: Environment) -> dict[str, str]:
    variables = dict(get_environment_config(environment).environment_variables)
    variables["VITE_SUPABASE_PUBLISHABLE_KEY"] = "publishable-key"
    return variables


class TestLookup:
    """Environment lookup and parsing."""

    def test_supported_environments(self):
        assert get_supported_environments() == [
            Environment.DEVELOPMENT,
            Environment.STAGING,
            Environment.PRODUCTION,
            Environment.PREVIEW,
        ]

    @pytest.mark.parametrize("value,expected", [("staging", True), ("preview", True), ("qa", False), ("Production", False)])
    def test_is_valid_environment(self, value: str, expected: bool):
        assert is_valid_environment(value) is expected

    def test_unknown_environment_raises(self):
        with pytest.raises(UnknownEnvironmentError, match="Unknown environment: qa"):
            get_environment_config("qa")
        with pytest.raises(UnknownEnvironmentError):
            get_deployment_config("qa")

    def test_lookup_accepts_names(self):
        assert get_environment_config("production").custom_domain == "agendai.clubemkt.digital"
        assert get_deployment_config(Environment.STAGING).requires_custom_domain is True

    @pytest.mark.parametrize(
        "environ,expected",
        [
            ({"VITE_ENVIRONMENT": "production"}, Environment.PRODUCTION),
            ({"NODE_ENV": "staging"}, Environment.STAGING),
            ({"VITE_ENVIRONMENT": "preview", "NODE_ENV": "production"}, Environment.PREVIEW),
            ({"NODE_ENV": "test"}, Environment.DEVELOPMENT),
            ({}, Environment.DEVELOPMENT),
        ],
    )
    def test_get_current_environment(self, environ: dict[str, str], expected: Environment):
        assert get_current_environment(environ) == expected


class TestCommands:
    """Build and deploy commands derived from the tables."""

    def test_build_command(self):
        assert get_deployment_config("production").build_command() == ["npm", "run", "build:production"]
        assert get_deployment_config("preview").build_command("pnpm") == ["pnpm", "run", "build:preview"]

    def test_deploy_command_with_platform_env(self):
        assert get_deployment_config("staging").deploy_command() == ["wrangler", "pages", "deploy", "dist", "--env", "staging"]

    def test_preview_deploy_command_has_no_env_flag(self):
        assert get_deployment_config("preview").deploy_command("build", "npx") == ["npx", "pages", "deploy", "build"]


class TestValidation:
    """Required variable validation."""

    @pytest.mark.parametrize("environment", list(Environment))
    def test_complete_variables_are_valid(self, environment: Environment):
        result = validate_environment_config(environment, full_variables(environment))

        assert result.valid is True
        assert result.errors == []

    @pytest.mark.parametrize("environment", list(Environment))
    @pytest.mark.parametrize("missing", REQUIRED_ENVIRONMENT_VARIABLES)
    def test_missing_variable_is_named(self, environment: Environment, missing: str):
        variables = full_variables(environment)
        del variables[missing]

        result = validate_environment_config(environment, variables)

        assert result.valid is False
        assert result.errors == [f"Missing environment variable: {missing}"]

    def test_blank_variable_is_missing(self):
        variables = full_variables(Environment.STAGING)
        variables["VITE_SUPABASE_PUBLISHABLE_KEY"] = "   "

        result = validate_environment_config(Environment.STAGING, variables)

        assert result.valid is False
        assert "Missing environment variable: VITE_SUPABASE_PUBLISHABLE_KEY" in result.errors

    def test_unknown_environment_is_invalid(self):
        result = validate_environment_config("qa", {})

        assert result.valid is False
        assert result.errors == ["Failed to load configuration: Unknown environment: qa"]

    def test_process_environment_overlays_table(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("VITE_SUPABASE_PUBLISHABLE_KEY", "from-process")
        monkeypatch.setenv("VITE_APP_DOMAIN", "override.example.com")
        monkeypatch.setenv("UNRELATED", "ignored")

        variables = resolve_environment_variables(Environment.PRODUCTION)

        assert variables["VITE_SUPABASE_PUBLISHABLE_KEY"] == "from-process"
        assert variables["VITE_APP_DOMAIN"] == "override.example.com"
        assert variables["VITE_ENVIRONMENT"] == "production"
        assert "UNRELATED" not in variables

    def test_publishable_key_is_not_stored(self):
        for environment in Environment:
            assert "VITE_SUPABASE_PUBLISHABLE_KEY" not in get_environment_config(environment).environment_variables


class TestExpectedUrls:
    """Deployment URL shapes per environment."""

    @pytest.mark.parametrize(
        "environment,url",
        [
            ("production", "https://agendai.clubemkt.digital"),
            ("production", "https://agendai.clubemkt.digital/dashboard"),
            ("staging", "https://a1b2c3d4.agendai-saas-staging.pages.dev"),
            ("preview", "https://agendai-saas-preview.pages.dev"),
            ("preview", "https://feature-x.pages.dev"),
        ],
    )
    def test_expected_urls(self, environment: str, url: str):
        assert matches_expected_url(environment, url) is True

    @pytest.mark.parametrize(
        "url",
        ["http://agendai.clubemkt.digital", "https://evil.example.com", "https://agendai.clubemkt.digital.evil.com"],
    )
    def test_unexpected_urls(self, url: str):
        assert matches_expected_url("production", url) is False

    @pytest.mark.parametrize(
        "environment,url",
        [
            ("production", "https://agendai-saas-staging.pages.dev"),
            ("production", "https://a1b2c3d4.agendai-saas-staging.pages.dev"),
            ("production", "https://some-other-site.pages.dev"),
            ("staging", "https://agendai-saas-production.pages.dev"),
            ("staging", "https://agendai.clubemkt.digital"),
        ],
    )
    def test_custom_domain_environments_reject_other_projects(self, environment: str, url: str):
        assert matches_expected_url(environment, url) is False

    def test_custom_domain_environments_accept_own_project_subdomain(self):
        assert matches_expected_url("production", "https://agendai-saas-production.pages.dev") is True


class TestGenerators:
    """Platform config and env file generation."""

    def test_wrangler_config_for_custom_domain(self):
        content = generate_wrangler_env_config("production")

        assert content.startswith("[env.production]\n")
        assert 'name = "agendai-saas-production"' in content
        assert '{ pattern = "agendai.clubemkt.digital", custom_domain = true },' in content
        assert "[env.production.vars]" in content
        assert 'VITE_ENVIRONMENT = "production"' in content

    def test_wrangler_config_without_routes(self):
        content = generate_wrangler_env_config("preview")

        assert "routes" not in content
        assert 'VITE_APP_DOMAIN = "preview.pages.dev"' in content

    def test_env_file_content(self):
        content = generate_env_file_content("staging", {"VITE_SUPABASE_PUBLISHABLE_KEY": "key"})
        lines = content.splitlines()

        assert lines[0] == "# Staging Environment Configuration"
        assert "VITE_ENVIRONMENT=staging" in lines
        assert "VITE_APP_DOMAIN=staging.agendai.clubemkt.digital" in lines
        assert "VITE_SUPABASE_PUBLISHABLE_KEY=key" in lines
        assert content.endswith("\n")
