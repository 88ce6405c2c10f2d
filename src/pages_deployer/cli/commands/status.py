"""Deployment status command."""

import asyncio

import typer

from pages_deployer.cli.utils import configure_logging, console, resolve_environment
from pages_deployer.deployment import DeploymentExecutor, DeploymentState
from pages_deployer.environments import get_current_environment


def status(
    deployment_id: str = typer.Argument(..., help="Deployment id reported by the deploy command"),
    environment: str | None = typer.Option(None, "--environment", "-e", help="Environment (defaults to VITE_ENVIRONMENT)"),
):
    """Show whether a deployment is the active one on the platform."""
    configure_logging()
    env = resolve_environment(environment) if environment else get_current_environment()

    result = asyncio.run(DeploymentExecutor(env).get_deployment_status(deployment_id))

    color = {DeploymentState.ACTIVE: "green", DeploymentState.UNKNOWN: "yellow"}.get(result.status, "red")
    console.print(f"Deployment {result.id}: [{color}]{result.status}[/{color}]")
    if result.error:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)
