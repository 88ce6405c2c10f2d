"""CLI utility functions shared across commands.

This module contains generic CLI utilities for:
- Environment argument validation
- Logging setup
- Console output of deployment and build results
"""

import typer
from rich.console import Console

from pages_deployer.build import format_file_size
from pages_deployer.deployment import BuildResult, CompleteDeploymentResult
from pages_deployer.environments import Environment, get_supported_environments, is_valid_environment
from pages_deployer.error_handling import RecoveryAction
from pages_deployer.logging import setup_logging
from pages_deployer.settings import get_settings

console = Console()


def resolve_environment(value: str) -> Environment:
    """Validate the environment argument.

    Raises:
        typer.Exit: If the environment is not supported
    """
    if not is_valid_environment(value):
        supported = ", ".join(get_supported_environments())
        console.print(f"[red]Error: Invalid environment '{value}'. Valid environments: {supported}[/red]")
        raise typer.Exit(1)
    return Environment(value)


def configure_logging(verbose: bool = False) -> None:
    """Compact loguru output; ``--verbose`` switches to DEBUG."""
    setup_logging("DEBUG" if verbose else get_settings().log_level, compact=True)


def print_recovery_actions(actions: list[RecoveryAction]) -> None:
    if not actions:
        return
    console.print("\n[bold]Recovery options:[/bold]")
    for index, action in enumerate(actions, start=1):
        console.print(f"  {index}. {action.description}")
        if action.command:
            console.print(f"     [dim]$ {action.command}[/dim]")


def print_build_result(result: BuildResult, verbose: bool = False) -> None:
    if result.success:
        console.print(f"\n[green]Build completed in {result.build_time_ms / 1000:.1f}s[/green]")
        if result.assets:
            console.print(f"  Files: {result.assets.total_files} ({format_file_size(result.assets.total_size)})")
        for warning in result.warnings:
            console.print(f"  [yellow]Warning: {warning}[/yellow]")
        return

    console.print(f"\n[red]Build failed: {result.error}[/red]")
    if verbose and result.error_report:
        console.print(result.error_report, markup=False, highlight=False)
    print_recovery_actions(result.recovery_actions)


def print_deployment_result(result: CompleteDeploymentResult, verbose: bool = False) -> None:
    """Print timings and URLs on success, stage and error on failure."""
    if not result.success:
        console.print(f"\n[red]Deployment failed at stage: {result.stage}[/red]")
        console.print(f"[red]Error: {result.error}[/red]")
        if verbose and result.error_report:
            console.print(result.error_report, markup=False, highlight=False)
        elif result.error_report:
            console.print("[dim]Run with --verbose for the detailed error report.[/dim]")
        print_recovery_actions(result.recovery_actions)
        return

    console.print("\n[bold green]Deployment completed successfully![/bold green]")
    console.print(f"  Environment: {result.environment}")
    console.print(f"  Build time: {result.build_time_ms / 1000:.1f}s")
    console.print(f"  Deploy time: {result.deploy_time_ms / 1000:.1f}s")
    console.print(f"  Total time: {result.total_time_ms / 1000:.1f}s")
    if result.url:
        console.print(f"  URL: {result.url}")
    if result.preview_url and result.preview_url != result.url:
        console.print(f"  Preview URL: {result.preview_url}")
    if result.deployment_id:
        console.print(f"  Deployment ID: {result.deployment_id}")

    if result.verification is not None:
        if result.verification.success:
            console.print("[green]Post-deployment verification passed[/green]")
        else:
            summary = result.verification.summary
            console.print(f"[yellow]Post-deployment verification failed ({summary.failed}/{summary.total} checks)[/yellow]")
