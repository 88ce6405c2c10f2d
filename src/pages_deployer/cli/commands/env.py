"""Environment configuration commands."""

import typer

from pages_deployer.cli.utils import console, resolve_environment
from pages_deployer.environments import (
    generate_env_file_content,
    generate_wrangler_env_config,
    resolve_environment_variables,
    validate_environment_config,
)

app = typer.Typer(help="Environment configuration")


@app.command()
def validate(environment: str = typer.Argument(..., help="Environment to validate")):
    """Check that every required variable of an environment is set.

    Examples:
        pages-deployer env validate production
    """
    env = resolve_environment(environment)
    result = validate_environment_config(env)

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    if not result.valid:
        console.print(f"[red]Configuration for {env} is invalid:[/red]")
        for error in result.errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)

    console.print(f"[green]Configuration for {env} is valid[/green]")


@app.command()
def generate(
    environment: str = typer.Argument(..., help="Environment to generate for"),
    wrangler: bool = typer.Option(False, "--wrangler", help="Print the platform config section instead of the .env file"),
):
    """Print generated configuration to stdout.

    Examples:
        pages-deployer env generate staging > .env.staging
        pages-deployer env generate production --wrangler
    """
    env = resolve_environment(environment)
    if wrangler:
        content = generate_wrangler_env_config(env)
    else:
        content = generate_env_file_content(env, resolve_environment_variables(env))
    console.print(content, markup=False, highlight=False, end="")
