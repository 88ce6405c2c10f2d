"""Main CLI application."""

import typer

from pages_deployer.cli.commands import env
from pages_deployer.cli.commands.build import build
from pages_deployer.cli.commands.deploy import deploy
from pages_deployer.cli.commands.status import status
from pages_deployer.cli.commands.validate import validate
from pages_deployer.cli.commands.verify import verify

app = typer.Typer(
    name="pages-deployer",
    help="Build, deploy and verify the static site on the edge platform",
    no_args_is_help=True,
)

app.command()(deploy)
app.command()(build)
app.command()(verify)
app.command()(status)
app.command()(validate)

# Register command groups
app.add_typer(env.app, name="env")
