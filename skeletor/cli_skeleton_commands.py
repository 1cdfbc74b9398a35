"""Skeleton CLI commands - list, show, create."""
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from skeletor.cli_support import (
    handle_cli_error,
    is_verbose,
    open_resolver,
    print_success,
)
from skeletor.core.errors import SkeletorError
from skeletor.core.loader import find_file, load_skeleton
from skeletor.models.refs import parse_repo_ref
from skeletor.models.skeleton import ResolvedSkeleton
from skeletor.repository.create import create_skeleton

# Module-level console instance (will be set by register function)
console: Console = Console()

REPO_OPTION_HELP = "Repository as <name>=<url-or-path>, may be repeated"


def build_file_tree(skeleton: ResolvedSkeleton) -> Tree:
    """Render the files of a skeleton as a tree, marking inherited files."""
    tree = Tree(f"[bold]{skeleton.name}[/bold]")
    nodes = {".": tree}

    for f in skeleton.files:
        parts = f.rel_path.split("/")
        parent = nodes.get("/".join(parts[:-1]) or ".", tree)

        label = parts[-1] + ("/" if f.is_dir else "")
        if f.is_template:
            label = f"[cyan]{label}[/cyan]"
        if f.inherited:
            label += " [dim](inherited)[/dim]"

        node = parent.add(label)
        if f.is_dir:
            nodes[f.rel_path] = node

    return tree


def list_skeletons(
    repo: Optional[List[str]] = typer.Option(None, "--repo", "-r", help=REPO_OPTION_HELP),
):
    """List skeletons of all configured repositories.

    Examples:
        skeletor skeleton list
        skeletor skeleton list --repo local=~/skeletons
    """
    try:
        skeletons = open_resolver(repo).list_skeletons()
    except SkeletorError as e:
        handle_cli_error(e, console, is_verbose())

    if not skeletons:
        console.print("[dim]No skeletons found[/dim]")
        return

    table = Table(title="Skeletons")
    table.add_column("Repository", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Path", style="dim")

    for skeleton in skeletons:
        table.add_row(skeleton.repo.name or "-", skeleton.name, skeleton.path)

    console.print(table)


def show(
    name: str = typer.Argument(..., help="Skeleton name, optionally as <repo>:<name>"),
    file: Optional[str] = typer.Option(None, "--file", "-f", help="Print a single file of the resolved skeleton"),
    repo: Optional[List[str]] = typer.Option(None, "--repo", "-r", help=REPO_OPTION_HELP),
):
    """Show a skeleton with its parent chain, values and files.

    Examples:
        skeletor skeleton show advanced
        skeletor skeleton show default:advanced --file README.md.skel
    """
    try:
        skeleton = load_skeleton(open_resolver(repo), name)
    except SkeletorError as e:
        handle_cli_error(e, console, is_verbose())

    if file:
        source = find_file(skeleton, file)
        if source is None or source.is_dir:
            handle_cli_error(SkeletorError(f"file {file!r} not found in skeleton {name!r}"), console)
        console.print(source.read_bytes().decode("utf-8", errors="replace"), markup=False, highlight=False, end="")
        return

    console.print(f"[bold]Name:[/bold] {skeleton.name}")
    if skeleton.parent is not None:
        console.print(f"[bold]Inheritance:[/bold] {skeleton}")
    if skeleton.description:
        console.print(f"[bold]Description:[/bold] {skeleton.description.strip()}")

    if skeleton.values:
        console.print("\n[bold]Values:[/bold]")
        console.print(yaml.safe_dump(skeleton.values, default_flow_style=False, sort_keys=True).rstrip(),
                      markup=False, highlight=False)

    console.print()
    console.print(build_file_tree(skeleton))


def create(
    repo_path: str = typer.Argument(..., help="Path of a local skeleton repository"),
    name: str = typer.Argument(..., help="Name of the new skeleton"),
):
    """Create a new skeleton with example files in a local repository.

    Examples:
        skeletor skeleton create ~/skeletons myskeleton
    """
    try:
        path = create_skeleton(parse_repo_ref(repo_path), name)
    except SkeletorError as e:
        handle_cli_error(e, console, is_verbose())

    print_success(console, f"Created skeleton {name} in {path}")


def register_skeleton_commands(
    app: typer.Typer,
    shared_console: Console,
):
    """Register skeleton commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    skeleton_app = typer.Typer(help="Inspect and create skeletons")

    skeleton_app.command("list")(list_skeletons)
    skeleton_app.command()(show)
    skeleton_app.command()(create)

    app.add_typer(skeleton_app, name="skeleton")
