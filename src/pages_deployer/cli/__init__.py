"""CLI module for pages-deployer.

Provides the command-line interface for building, deploying and verifying.
"""

from pages_deployer.cli.app import app

__all__ = ["app"]
