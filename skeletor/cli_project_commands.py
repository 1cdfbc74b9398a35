"""Project CLI commands - create projects from skeletons."""
import os
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text

from skeletor.cli_support import (
    confirm_action,
    handle_cli_error,
    is_verbose,
    open_resolver,
    print_info,
    print_success,
    print_warning,
)
from skeletor.core.config import get_config
from skeletor.core.errors import SkeletorError
from skeletor.core.loader import compose_skeletons, load_skeletons
from skeletor.core.values import load_values_file, merge_all, parse_set_values
from skeletor.models.skeleton import ResolvedSkeleton
from skeletor.project.extras import DirectoryGitignoreProvider, DirectoryLicenseProvider
from skeletor.project.filesystem import MemoryFilesystem, OSFilesystem
from skeletor.project.plan import OpType, Plan, ProjectOptions, build_plan
from skeletor.services.git_client import GitClient

# Module-level console instance (will be set by register function)
console: Console = Console()

OP_STYLES = {
    OpType.CREATE: "green",
    OpType.OVERWRITE: "yellow",
    OpType.SKIP_EXISTING: "dim",
    OpType.SKIP_USER: "dim",
}


def print_config(options: ProjectOptions, skeleton_names: List[str], skeleton: ResolvedSkeleton) -> None:
    table = Table(title="Project configuration", show_header=False)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Name", Text(options.name, style="cyan"))
    table.add_row("Directory", Text(options.target_dir, style="cyan"))
    table.add_row("Host", options.host)
    table.add_row("Owner", options.owner or "-")
    table.add_row("Skeletons", " ".join(skeleton_names))
    table.add_row("License", options.license.name if options.license else "-")
    table.add_row("Gitignore", options.gitignore.query if options.gitignore else "-")

    if skeleton.values:
        table.add_row("Skeleton values", Text(yaml.safe_dump(skeleton.values, default_flow_style=False).rstrip()))
    if options.values:
        table.add_row("Value overrides", Text(yaml.safe_dump(options.values, default_flow_style=False).rstrip()))

    console.print(table)


def print_plan(plan: Plan) -> None:
    table = Table(title="File operations")
    table.add_column("Source", style="dim")
    table.add_column("Destination")
    table.add_column("Action")

    for op in plan.operations:
        source = op.source.rel_path if op.source.abs_path else "<generated>"
        dest = op.destination.path + ("/" if op.source.is_dir else "")
        style = OP_STYLES[op.type]
        table.add_row(source, f"[{style}]{dest}[/{style}]", f"[{style}]{op.type.value}[/{style}]")

    console.print(table)


def create(
    name: str = typer.Argument(..., help="Project name"),
    skeletons: List[str] = typer.Argument(..., help="Skeletons to compose, optionally as <repo>:<name>"),
    directory: Optional[str] = typer.Option(None, "--dir", "-d", help="Project directory (default: ./<name>)"),
    owner: Optional[str] = typer.Option(None, "--owner", help="Project owner"),
    host: Optional[str] = typer.Option(None, "--host", help="Project host"),
    values_files: Optional[List[str]] = typer.Option(None, "--values-file", help="YAML file with value overrides"),
    set_values: Optional[List[str]] = typer.Option(None, "--set", help="Value override as key.path=value"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite all existing files"),
    overwrite_files: Optional[List[str]] = typer.Option(None, "--overwrite-file", help="Overwrite this path if it exists"),
    skip_files: Optional[List[str]] = typer.Option(None, "--skip-file", help="Never write this path"),
    license_key: Optional[str] = typer.Option(None, "--license", help="License key to write to LICENSE"),
    gitignore: Optional[str] = typer.Option(None, "--gitignore", help="Comma-separated gitignore templates"),
    init_git: bool = typer.Option(False, "--init-git", help="Initialize a git repository in the project directory"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be written without writing"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    repo: Optional[List[str]] = typer.Option(None, "--repo", "-r", help="Repository as <name>=<url-or-path>"),
):
    """Create a new project from one or more skeletons.

    Later skeletons override files and values of earlier ones.

    Examples:
        skeletor project create widget advanced
        skeletor project create widget base python --set app.port=8080
        skeletor project create widget advanced --license mit --gitignore python --dry-run
    """
    config = get_config()
    target_dir = os.path.abspath(os.path.expanduser(directory or name))

    try:
        resolver = open_resolver(repo)
        resolver.prefetch()
        skeleton = compose_skeletons(load_skeletons(resolver, skeletons))

        values = merge_all(
            *[load_values_file(path) for path in values_files or []],
            parse_set_values(set_values or []),
        )

        options = ProjectOptions(
            name=name,
            target_dir=target_dir,
            host=host or "",
            owner=owner or "",
            values=values,
            license=DirectoryLicenseProvider(config.license_dir).get(license_key) if license_key else None,
            gitignore=DirectoryGitignoreProvider(config.gitignore_dir).get(gitignore) if gitignore else None,
            overwrite_all=overwrite,
            overwrite_files=list(overwrite_files or []),
            skip_files=list(skip_files or []),
        )

        print_config(options, skeletons, skeleton)

        plan = build_plan(skeleton, options, OSFilesystem())
    except SkeletorError as e:
        handle_cli_error(e, console, is_verbose())

    print_plan(plan)

    if plan.skips_existing:
        print_warning(console, "Some files will be skipped because they already exist, "
                               "pass --overwrite or --overwrite-file to overwrite")

    if plan.is_noop:
        print_warning(console, f"No files to write to {target_dir}")
        return

    if dry_run:
        try:
            stats = plan.apply(MemoryFilesystem())
        except (SkeletorError, OSError) as e:
            handle_cli_error(e, console, is_verbose())
        print_info(console, "Dry run, nothing written")
        console.print(str(stats))
        return

    if os.path.exists(target_dir):
        message = f"Project directory {target_dir} already exists, still create project?"
    else:
        message = f"Create project in {target_dir}?"

    if not confirm_action(message, yes):
        raise typer.Exit(0)

    try:
        stats = plan.apply(OSFilesystem())
        if init_git and GitClient().init(target_dir):
            print_info(console, f"Initialized git repository in {target_dir}")
    except (SkeletorError, OSError) as e:
        handle_cli_error(e, console, is_verbose())

    print_success(console, f"Project {name} created in {target_dir}")
    console.print(str(stats))


def register_project_commands(
    app: typer.Typer,
    shared_console: Console,
):
    """Register project commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    project_app = typer.Typer(help="Create projects from skeletons")
    project_app.command()(create)

    app.add_typer(project_app, name="project")
