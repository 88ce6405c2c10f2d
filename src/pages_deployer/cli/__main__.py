"""CLI entry point.

Usage:
    python -m pages_deployer.cli deploy staging
    pages-deployer deploy production --verbose
    pages-deployer env validate production
"""

from pages_deployer.cli.app import app
from pages_deployer.logging import setup_logging


def main() -> None:
    """CLI entry point with logging configuration."""
    setup_logging("INFO", compact=True)
    app()


if __name__ == "__main__":
    main()
