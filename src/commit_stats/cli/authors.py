"""Authors command -- per-author commit and line totals."""

from typing import List, Optional

import typer

from ..aggregation import GroupKey
from ..exceptions import CommitStatsError
from . import app
from . import _common as opts
from ._common import build_criteria, check_format, get_config
from ._grouped import run_grouped


@app.command()
def authors(
    ctx: typer.Context,
    branch: Optional[str] = opts.BRANCH,
    since: Optional[str] = opts.SINCE,
    until: Optional[str] = opts.UNTIL,
    author: Optional[List[str]] = opts.AUTHOR,
    exclude_author: Optional[List[str]] = opts.EXCLUDE_AUTHOR,
    path: Optional[List[str]] = opts.PATH,
    merges: Optional[str] = opts.MERGES,
    merge_diff: Optional[str] = opts.MERGE_DIFF,
    max_commits: Optional[int] = opts.MAX_COMMITS,
    identity: Optional[str] = opts.IDENTITY,
    sort: Optional[str] = opts.SORT,
    order: Optional[str] = opts.ORDER,
    top: Optional[int] = opts.TOP,
    above: Optional[int] = opts.ABOVE,
    output_format: str = opts.FORMAT,
    workers: Optional[int] = opts.WORKERS,
):
    """
    Commits and changed lines per author.

    [bold cyan]Examples:[/bold cyan]

      commit-stats authors

      commit-stats authors --sort lines-added --top 5 --merges exclude

      commit-stats authors --identity alias --format csv
    """
    check_format(output_format)
    try:
        criteria = build_criteria(
            get_config(ctx), branch, since, until, author, exclude_author, path, merges, merge_diff, max_commits
        )
    except CommitStatsError as e:
        raise opts.fail(e)
    run_grouped(
        ctx,
        GroupKey.author(),
        criteria,
        sort=sort,
        order=order,
        top=top,
        above=above,
        output_format=output_format,
        identity=identity,
        workers=workers,
        title="Authors",
    )
