"""Build command."""

import asyncio

import typer

from pages_deployer.cli.utils import configure_logging, console, print_build_result, resolve_environment
from pages_deployer.deployment import DeploymentExecutor


def build(
    environment: str = typer.Argument(..., help="Target environment: development, staging, production or preview"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and detailed error reports"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate the build without running it"),
):
    """Build and validate the site without deploying it.

    Examples:
        pages-deployer build staging
        pages-deployer build production --verbose
    """
    env = resolve_environment(environment)
    configure_logging(verbose)

    console.print(f"[bold]Building for {env}...[/bold]\n")
    result = asyncio.run(DeploymentExecutor(env, dry_run=dry_run, verbose=verbose).execute_build())

    print_build_result(result, verbose)
    if not result.success:
        raise typer.Exit(1)
