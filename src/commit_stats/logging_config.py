"""
Logging configuration for commit-stats.

Records go to stderr through rich so that table and JSON output on stdout
stays clean. Only the ``commit_stats`` logger is configured; the root logger
of an application embedding the library is left alone.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "commit_stats"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Install handlers on the ``commit_stats`` logger.

    Calling it again replaces the handlers installed by the previous call, so
    the CLI can run several times in one process.

    Args:
        verbose: DEBUG level, with source paths and locals in tracebacks
        quiet: ERROR level only
        log_file: Also append plain-text records to this file

    Returns:
        The configured ``commit_stats`` logger
    """
    level = logging.ERROR if quiet else logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # markup off: author names such as "dependabot[bot]" are logged verbatim
    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_path=verbose,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under ``commit_stats``; pass ``__name__`` from a module."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
