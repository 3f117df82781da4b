"""Aggregate-sort-render flow shared by the authors and files commands."""

from typing import Optional

import typer

from ..aggregation import GroupKey, aggregate, aggregate_parallel
from ..criteria import CommitFilterCriteria
from ..exceptions import CommitStatsError
from ..formatters import get_formatter
from ..view import threshold, view
from ._common import fail, get_config, open_stream


def run_grouped(
    ctx: typer.Context,
    group_key: GroupKey,
    criteria: CommitFilterCriteria,
    sort: Optional[str],
    order: Optional[str],
    top: Optional[int],
    above: Optional[int],
    output_format: str,
    identity: Optional[str] = None,
    workers: Optional[int] = None,
    title: Optional[str] = None,
) -> None:
    config = get_config(ctx)
    sort_key = sort or config.sort_key
    try:
        stream = open_stream(ctx, criteria)
        identity = identity or config.identity
        workers = workers or config.workers
        if workers and workers > 1:
            aggregated = aggregate_parallel(stream, group_key, workers=workers, identity=identity)
        else:
            aggregated = aggregate(stream, group_key, identity=identity)
        if above is not None:
            aggregated = threshold(aggregated, sort_key, above)
        rows = view(aggregated, sort_key, order or config.order)
    except (CommitStatsError, ValueError) as e:
        raise fail(e)

    limit = top if top is not None else config.top
    if limit:
        rows = rows[:limit]
    get_formatter(output_format).render(rows, group_key, title=title)
