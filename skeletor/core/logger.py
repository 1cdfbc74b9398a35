"""Logging for Skeletor: Rich console output plus an optional log file.

Console output goes to stderr so that command output on stdout (file
contents, tables) stays clean for piping.
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

LOG_FILENAME = "skeletor.log"

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

# Level applied to loggers handed out by get_logger
_level = logging.INFO

_file_handler: Optional[logging.FileHandler] = None


def default_log_file() -> Path:
    from skeletor.core.config import get_config

    return Path(get_config().cache_dir) / LOG_FILENAME


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Also write Skeletor logs to a file.

    Only the first call installs a handler; later calls return the path
    already in use.

    Args:
        log_file: Path to log file (defaults to skeletor.log in the cache dir)
        verbose: Write debug messages as well

    Returns:
        Path of the log file actually used, /tmp/skeletor.log if the
        requested directory is not writable
    """
    global _file_handler

    if _file_handler is not None:
        return Path(_file_handler.baseFilename)

    target = Path(log_file) if log_file else default_log_file()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target = Path("/tmp") / LOG_FILENAME

    handler = logging.FileHandler(target)
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    package_logger = logging.getLogger("skeletor")
    package_logger.addHandler(handler)
    _file_handler = handler

    package_logger.debug(f"File logging initialized: {target}")
    return target


def set_log_level(level: int) -> None:
    """Set the level of every Skeletor logger, including ones created later."""
    global _level
    _level = level

    logging.getLogger("skeletor").setLevel(level)
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if name.startswith("skeletor.") and isinstance(logger, logging.Logger):
            logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with Rich console output.

    Args:
        name: Logger name (typically __name__)
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(_level)

    return logger
