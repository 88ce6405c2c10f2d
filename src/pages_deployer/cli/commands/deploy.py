"""Deploy command."""

import asyncio

import typer

from pages_deployer.cli.utils import configure_logging, console, print_deployment_result, resolve_environment
from pages_deployer.deployment import DeploymentExecutor
from pages_deployer.reporting import create_reporter_from_settings
from pages_deployer.settings import get_settings
from pages_deployer.verification import DeploymentVerifier


def deploy(
    environment: str = typer.Argument(..., help="Target environment: development, staging, production or preview"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and detailed error reports"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate the run without invoking any external tool"),
    no_github: bool = typer.Option(False, "--no-github", help="Disable GitHub deployment status reporting"),
    skip_spa: bool = typer.Option(False, "--skip-spa", help="Skip the SPA routing verification"),
    skip_assets: bool = typer.Option(False, "--skip-assets", help="Skip the asset optimization verification"),
    timeout: int | None = typer.Option(None, "--timeout", help="Verification request timeout in milliseconds"),
    verify: bool = typer.Option(True, "--verify/--no-verify", help="Verify the live deployment"),
):
    """Build, deploy and verify the site for one environment.

    Exits with 1 if the build, the deployment or the verification fails.

    Examples:
        pages-deployer deploy staging
        pages-deployer deploy production --verbose
        pages-deployer deploy preview --dry-run --no-github
    """
    env = resolve_environment(environment)
    configure_logging(verbose)
    settings = get_settings()
    timeout_ms = timeout or settings.http_timeout_ms

    reporter = None if no_github else create_reporter_from_settings(settings, env)
    executor = DeploymentExecutor(
        env,
        settings=settings,
        reporter=reporter,
        verifier_factory=lambda: DeploymentVerifier(timeout_ms=timeout_ms, verbose=verbose),
        dry_run=dry_run,
        verbose=verbose,
    )

    mode = " [dim](dry run)[/dim]" if dry_run else ""
    console.print(f"[bold]Deploying to {env}{mode}...[/bold]\n")

    if verify:
        coroutine = executor.deploy_with_verification(skip_spa_routing=skip_spa, skip_asset_optimization=skip_assets)
    else:
        coroutine = executor.deploy()
    result = asyncio.run(coroutine)

    print_deployment_result(result, verbose)
    if not result.success or (result.verification is not None and not result.verification.success):
        raise typer.Exit(1)
