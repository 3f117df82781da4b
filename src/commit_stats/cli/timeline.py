"""Timeline command -- commits and lines per calendar period."""

import csv
import json
import sys
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..aggregation import GroupKey, aggregate, aggregate_nested
from ..exceptions import CommitStatsError
from ..formatters import get_formatter, stat_to_dict
from ..view import timeline as build_timeline
from ..view import view
from . import app
from . import _common as opts
from ._common import build_criteria, check_format, console, fail, get_config, open_stream


@app.command()
def timeline(
    ctx: typer.Context,
    granularity: Optional[str] = typer.Option(
        None, "--granularity", "-g", help="Bucket size: day, week, month or year"
    ),
    fill: bool = typer.Option(True, "--fill/--no-fill", help="Show empty periods between active ones"),
    by_author: bool = typer.Option(False, "--by-author", help="Break every period down by author"),
    branch: Optional[str] = opts.BRANCH,
    since: Optional[str] = opts.SINCE,
    until: Optional[str] = opts.UNTIL,
    author: Optional[List[str]] = opts.AUTHOR,
    exclude_author: Optional[List[str]] = opts.EXCLUDE_AUTHOR,
    path: Optional[List[str]] = opts.PATH,
    merges: Optional[str] = opts.MERGES,
    merge_diff: Optional[str] = opts.MERGE_DIFF,
    identity: Optional[str] = opts.IDENTITY,
    output_format: str = opts.FORMAT,
):
    """
    Commits and changed lines per day, week, month or year.

    [bold cyan]Examples:[/bold cyan]

      commit-stats timeline

      commit-stats timeline -g week --since 2024-01-01 --until 2024-03-31

      commit-stats timeline --by-author --format json
    """
    check_format(output_format)
    config = get_config(ctx)
    try:
        group_key = GroupKey.time_bucket(granularity or config.granularity)
    except ValueError:
        raise typer.BadParameter("choose from day, week, month, year", param_hint="--granularity")

    try:
        criteria = build_criteria(config, branch, since, until, author, exclude_author, path, merges, merge_diff)
        stream = open_stream(ctx, criteria)
        if by_author:
            nested = aggregate_nested(stream, group_key, GroupKey.author(), identity=identity or config.identity)
        else:
            rows = build_timeline(aggregate(stream, group_key), fill_gaps=fill)
    except (CommitStatsError, ValueError) as e:
        raise fail(e)

    if not by_author:
        get_formatter(output_format).render(rows, group_key, title=f"Commits per {group_key}")
        return

    periods = sorted(nested, key=lambda bucket: bucket.start)
    if output_format == "rich":
        _render_nested(periods, nested, group_key, config.sort_key)
        return
    author_key = GroupKey.author()
    flat = [
        {str(group_key): bucket.label, **stat_to_dict(stat, author_key)}
        for bucket in periods
        for stat in view(nested[bucket], config.sort_key)
    ]
    if output_format == "json":
        print(json.dumps(flat, indent=2))
    elif flat:
        writer = csv.DictWriter(sys.stdout, fieldnames=list(flat[0]), lineterminator="\n")
        writer.writeheader()
        writer.writerows(flat)


def _render_nested(periods, nested, group_key, sort_key):
    table = Table(title=f"Commits per {group_key} and author", show_lines=False, pad_edge=True)
    table.add_column(str(group_key).capitalize(), style="bold")
    table.add_column("Author")
    table.add_column("Commits", justify="right", style="cyan")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Removed", justify="right", style="red")
    for bucket in periods:
        for index, stat in enumerate(view(nested[bucket], sort_key)):
            table.add_row(
                bucket.label if index == 0 else "",
                escape(str(stat.key)),
                str(stat.commits_count),
                f"+{stat.lines_added}",
                f"-{stat.lines_removed}",
            )
    console.print()
    console.print(table)
    console.print()
