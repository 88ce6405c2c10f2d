"""Verify command."""

import asyncio

import typer

from pages_deployer.cli.utils import configure_logging, console
from pages_deployer.settings import get_settings
from pages_deployer.verification import DeploymentVerifier, VerificationOptions


def verify(
    url: str = typer.Argument(..., help="Deployment URL to verify"),
    skip_spa: bool = typer.Option(False, "--skip-spa", help="Skip the SPA routing verification"),
    skip_assets: bool = typer.Option(False, "--skip-assets", help="Skip the asset optimization verification"),
    timeout: int | None = typer.Option(None, "--timeout", help="Request timeout in milliseconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every check"),
):
    """Run post-deployment verification against a live URL.

    Examples:
        pages-deployer verify https://agendai.clubemkt.digital
        pages-deployer verify https://preview.agendai-saas-preview.pages.dev --skip-assets
    """
    configure_logging(verbose)
    verifier = DeploymentVerifier(timeout_ms=timeout or get_settings().http_timeout_ms, verbose=verbose)

    console.print(f"[bold]Verifying {url}...[/bold]\n")
    result = asyncio.run(
        verifier.verify(VerificationOptions(url=url, skip_spa_routing=skip_spa, skip_asset_optimization=skip_assets))
    )

    console.print(verifier.format_results(result), markup=False, highlight=False)
    if not result.success:
        raise typer.Exit(1)
