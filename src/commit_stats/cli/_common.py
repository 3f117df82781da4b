"""Shared CLI helpers: options, criteria building, repository opening."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Union

import typer
from rich.console import Console
from rich.markup import escape

from ..config import StatsConfig
from ..criteria import CommitFilterCriteria
from ..git import open_repository
from ..history import CommitStream

console = Console()
err_console = Console(stderr=True)

FORMATS = ("rich", "json", "csv")

# Filter options shared by every command
BRANCH = typer.Option(None, "--branch", "-b", help="Branch, tag or commit to walk (default: all refs)")
SINCE = typer.Option(None, "--since", help="Earliest commit date, YYYY-MM-DD or ISO datetime (inclusive)")
UNTIL = typer.Option(None, "--until", help="Latest commit date, YYYY-MM-DD or ISO datetime (inclusive)")
AUTHOR = typer.Option(None, "--author", "-a", help="Only commits by this name, email or 'Name <email>'")
EXCLUDE_AUTHOR = typer.Option(None, "--exclude-author", help="Skip commits by this author")
PATH = typer.Option(None, "--path", "-p", help="Only commits touching this file or directory")
MERGES = typer.Option(None, "--merges", help="Merge commits: include, exclude or only")
MERGE_DIFF = typer.Option(None, "--merge-diff", help="Merge lines: skip or first-parent")
MAX_COMMITS = typer.Option(None, "--max-commits", help="Stop after this many matching commits", min=1)

# View options
SORT = typer.Option(None, "--sort", "-s", help="commits, lines-added, lines-removed, lines-net, files-changed")
ORDER = typer.Option(None, "--order", help="asc or desc")
TOP = typer.Option(None, "--top", "-n", help="Show only the first N rows", min=0)
ABOVE = typer.Option(None, "--above", help="Keep rows whose sort metric is greater than this")
FORMAT = typer.Option("rich", "--format", "-f", help="Output format: rich, json or csv")
IDENTITY = typer.Option(None, "--identity", help="Author identity: exact, email, name or alias")
WORKERS = typer.Option(None, "--workers", "-w", help="Fold with N worker threads", min=1)


def parse_bound(value: Optional[str], option: str) -> Union[date, datetime, None]:
    """``YYYY-MM-DD`` becomes a whole-day date, anything longer an ISO datetime."""
    if value is None:
        return None
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"invalid date {value!r}", param_hint=option)


def check_format(output_format: str) -> str:
    if output_format not in FORMATS:
        raise typer.BadParameter(f"choose from {', '.join(FORMATS)}", param_hint="--format")
    return output_format


def get_config(ctx: typer.Context) -> StatsConfig:
    obj = ctx.obj or {}
    return obj.get("config") or StatsConfig()


def build_criteria(
    config: StatsConfig,
    branch: Optional[str] = None,
    since: Optional[str] = None,
    until: Optional[str] = None,
    author: Optional[List[str]] = None,
    exclude_author: Optional[List[str]] = None,
    path: Optional[List[str]] = None,
    merges: Optional[str] = None,
    merge_diff: Optional[str] = None,
    max_commits: Optional[int] = None,
) -> CommitFilterCriteria:
    """Combine CLI flags with configured defaults."""
    return CommitFilterCriteria(
        authors=tuple(author or ()),
        exclude_authors=tuple(exclude_author or ()),
        since=parse_bound(since, "--since"),
        until=parse_bound(until, "--until"),
        paths=tuple(path or ()),
        ref=branch or config.default_branch,
        merges=merges or config.merges,
        merge_diff=merge_diff or config.merge_diff,
        on_diff_error=config.on_diff_error,
        max_commits=max_commits or config.max_commits or None,
    )


def open_stream(ctx: typer.Context, criteria: CommitFilterCriteria) -> CommitStream:
    config = get_config(ctx)
    repo_path: Path = (ctx.obj or {}).get("repo", Path.cwd())
    backend = open_repository(
        repo_path,
        git_executable=config.git_executable,
        timeout_seconds=config.git_timeout_seconds,
    )
    return CommitStream(backend, criteria)


def fail(error: Exception) -> typer.Exit:
    """Print a library error and return the exit to raise."""
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    return typer.Exit(getattr(error, "exit_code", 1))
