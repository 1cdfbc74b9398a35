#!/usr/bin/env python3
"""Skeletor CLI - Create projects from skeleton repositories."""
from typing import Optional

import typer
from rich.console import Console

from skeletor import __version__
from skeletor.cli_project_commands import register_project_commands
from skeletor.cli_repository_commands import register_repository_commands
from skeletor.cli_skeleton_commands import register_skeleton_commands
from skeletor.cli_support import setup_logging

app = typer.Typer(
    name="skeletor",
    help="""Skeletor - Create projects from skeleton repositories

Quick start:
  skeletor repository create ~/skeletons           # Start a local repository
  skeletor skeleton list --repo local=~/skeletons  # Browse skeletons
  skeletor project create myproject default        # Create a project

More commands: skeletor --help
""",
    add_completion=False,
)

console = Console()


def _version_callback(value: bool):
    if value:
        console.print(f"skeletor {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    setup_logging(verbose=verbose, log_file=log_file)


# Attach modular subcommands
register_skeleton_commands(app, console)
register_project_commands(app, console)
register_repository_commands(app, console)

if __name__ == "__main__":
    app()
