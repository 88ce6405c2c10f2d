"""Edge platform readiness command."""

import asyncio

import typer

from pages_deployer.cli.utils import configure_logging, console, resolve_environment
from pages_deployer.deployment import DeploymentExecutor


def validate(
    environment: str = typer.Argument(..., help="Target environment: development, staging, production or preview"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Check the platform CLI, its login and wrangler.toml before deploying.

    Examples:
        pages-deployer validate production
    """
    env = resolve_environment(environment)
    configure_logging(verbose)

    result = asyncio.run(DeploymentExecutor(env, verbose=verbose).validate_platform())

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    if not result.valid:
        console.print(f"[red]Platform setup for {env} is not ready:[/red]")
        for error in result.errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)

    console.print(f"[green]Platform setup for {env} is ready[/green]")
