"""Repository CLI commands - create local skeleton repositories."""
from typing import Optional

import typer
from rich.console import Console

from skeletor.cli_support import handle_cli_error, is_verbose, print_info, print_success
from skeletor.core.errors import SkeletorError
from skeletor.repository.create import create_repository, create_skeleton

# Module-level console instance (will be set by register function)
console: Console = Console()


def create(
    path: str = typer.Argument(..., help="Directory of the new repository"),
    skeleton: Optional[str] = typer.Option("default", "--skeleton", "-s", help="Name of the initial skeleton"),
    empty: bool = typer.Option(False, "--empty", help="Do not create an initial skeleton"),
):
    """Create a new local skeleton repository.

    Examples:
        skeletor repository create ~/skeletons
        skeletor repository create ~/skeletons --skeleton python
    """
    try:
        ref = create_repository(path)
        print_success(console, f"Created repository {ref.local_path}")

        if not empty and skeleton:
            skeleton_path = create_skeleton(ref, skeleton)
            print_success(console, f"Created skeleton {skeleton} in {skeleton_path}")
    except SkeletorError as e:
        handle_cli_error(e, console, is_verbose())

    print_info(console, f"Use it with: skeletor skeleton list --repo local={ref.local_path}")


def register_repository_commands(
    app: typer.Typer,
    shared_console: Console,
):
    """Register repository commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    repository_app = typer.Typer(help="Manage skeleton repositories")
    repository_app.command()(create)

    app.add_typer(repository_app, name="repository")
