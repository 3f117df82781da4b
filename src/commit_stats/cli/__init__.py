"""CLI entry point: registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..config import load_config
from ..exceptions import ConfigurationError
from ..logging_config import setup_logging
from ._common import console, fail

app = typer.Typer(
    name="commit-stats",
    help="commit-stats - commit history statistics for git repositories",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"commit-stats {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Path = typer.Option(
        Path("."),
        "--repo",
        "-C",
        help="Path to the git repository",
        file_okay=False,
        resolve_path=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Explicit TOML config file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append log records to this file", dir_okay=False
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    Commit statistics per author, file and time period.

    [bold cyan]Examples:[/bold cyan]

      commit-stats authors --sort lines-added --top 10

      commit-stats -C ../other-repo timeline --granularity week --since 2024-01-01

      commit-stats files --path src/ --format json
    """
    try:
        settings = load_config(config_file=config, verbose=verbose, quiet=quiet)
    except ConfigurationError as e:
        raise fail(e)
    setup_logging(
        verbose=settings.verbosity == "verbose",
        quiet=settings.verbosity == "quiet",
        log_file=str(log_file) if log_file else None,
    )
    ctx.obj = {"repo": repo, "config": settings}


# Import subcommands to register them
from .authors import authors as _authors  # noqa: F401, E402
from .files import files as _files  # noqa: F401, E402
from .timeline import timeline as _timeline  # noqa: F401, E402
from .activity import activity as _activity  # noqa: F401, E402
from .commits import commits as _commits  # noqa: F401, E402
