"""Shared utilities for Skeletor CLI modules."""
from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from skeletor.core.config import get_config, parse_repository_map
from skeletor.core.errors import SkeletorError
from skeletor.repository import RepositoryResolver, open_repositories

# Global CLI flags, set by the app callback
_state = {"verbose": False}


def is_verbose() -> bool:
    return _state["verbose"]


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Set up console log level and, if requested, file logging.

    Args:
        verbose: Enable debug logging
        log_file: Path to log file (optional)
    """
    from skeletor.core.logger import set_log_level, setup_file_logging

    _state["verbose"] = verbose
    set_log_level(logging.DEBUG if verbose else logging.INFO)
    if log_file:
        setup_file_logging(log_file=log_file, verbose=verbose)


def repository_map(repo_options: Optional[List[str]] = None) -> dict:
    """Combine configured repositories with ``--repo name=url`` options.

    Options win over configured repositories of the same name.

    Raises:
        SkeletorError: If an option is malformed
    """
    repositories = dict(get_config().repositories)
    for option in repo_options or []:
        try:
            repositories.update(parse_repository_map(option))
        except ValueError as e:
            raise SkeletorError(str(e)) from e
    return repositories


def open_resolver(repo_options: Optional[List[str]] = None) -> RepositoryResolver:
    """Open every configured repository behind a single resolver."""
    return open_repositories(repository_map(repo_options))


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def confirm_action(message: str, yes_flag: bool = False) -> bool:
    """Prompt user for confirmation unless --yes was given."""
    if yes_flag:
        return True
    return typer.confirm(message)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    console.print(f"[green]{prefix}[/green] {escape(message)}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    console.print(f"[yellow]{prefix}[/yellow] {escape(message)}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    console.print(f"[cyan]{prefix}[/cyan] {escape(message)}")
