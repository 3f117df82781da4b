"""Commits command -- list the matching commit records."""

import json
from dataclasses import replace
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..exceptions import CommitStatsError
from . import app
from . import _common as opts
from ._common import build_criteria, console, fail, get_config, open_stream


@app.command()
def commits(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of commits to list", min=1),
    oldest_first: bool = typer.Option(False, "--oldest-first", help="List oldest commits first"),
    branch: Optional[str] = opts.BRANCH,
    since: Optional[str] = opts.SINCE,
    until: Optional[str] = opts.UNTIL,
    author: Optional[List[str]] = opts.AUTHOR,
    exclude_author: Optional[List[str]] = opts.EXCLUDE_AUTHOR,
    path: Optional[List[str]] = opts.PATH,
    merges: Optional[str] = opts.MERGES,
    merge_diff: Optional[str] = opts.MERGE_DIFF,
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    List matching commits with their change stats.

    [bold cyan]Examples:[/bold cyan]

      commit-stats commits --limit 5

      commit-stats commits --merges only --merge-diff first-parent --json
    """
    config = get_config(ctx)
    try:
        criteria = build_criteria(
            config, branch, since, until, author, exclude_author, path, merges, merge_diff, max_commits=limit
        )
        if oldest_first:
            criteria = replace(criteria, order="oldest-first")
        records = list(open_stream(ctx, criteria))
    except CommitStatsError as e:
        raise fail(e)

    if json_output:
        _output_json(records)
    else:
        _output_rich(records)


def _output_json(records):
    """Machine-readable JSON output."""
    data = [
        {
            "hash": r.hash,
            "author": r.author.name,
            "email": r.author.email,
            "timestamp": r.timestamp.isoformat(),
            "parents": r.parent_count,
            "subject": r.subject,
            "lines_added": r.stats.lines_added,
            "lines_removed": r.stats.lines_removed,
            "files_changed": r.stats.files_changed,
            "diff_skipped": r.diff_skipped,
            "files": [
                {
                    "path": f.path,
                    "kind": f.kind.value,
                    "old_path": f.old_path,
                    "lines_added": f.lines_added,
                    "lines_removed": f.lines_removed,
                    "binary": f.binary,
                }
                for f in r.files
            ],
        }
        for r in records
    ]
    print(json.dumps(data, indent=2))


def _output_rich(records):
    """Human-readable Rich table output."""
    if not records:
        console.print("[yellow]No matching commits.[/yellow]")
        return

    table = Table(title="Commits", show_lines=False, pad_edge=True)
    table.add_column("Commit", style="cyan")
    table.add_column("Date", style="green")
    table.add_column("Author", style="bold")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Removed", justify="right", style="red")
    table.add_column("Files", justify="right", style="yellow")
    table.add_column("Subject")

    for r in records:
        marker = " (merge)" if r.is_merge else ""
        table.add_row(
            r.hash[:8],
            r.timestamp.strftime("%Y-%m-%d %H:%M"),
            escape(r.author.name or r.author.email),
            f"+{r.stats.lines_added}",
            f"-{r.stats.lines_removed}",
            str(r.stats.files_changed),
            escape(r.subject) + marker,
        )

    console.print()
    console.print(table)
    console.print()
