"""Activity command -- weekday x hour heatmap of commits."""

import json
from typing import List, Optional

import typer
from rich.table import Table

from ..aggregation import activity_heatmap
from ..exceptions import CommitStatsError
from . import app
from . import _common as opts
from ._common import build_criteria, console, fail, get_config, open_stream

_SHADES = " ░▒▓█"


@app.command()
def activity(
    ctx: typer.Context,
    branch: Optional[str] = opts.BRANCH,
    since: Optional[str] = opts.SINCE,
    until: Optional[str] = opts.UNTIL,
    author: Optional[List[str]] = opts.AUTHOR,
    exclude_author: Optional[List[str]] = opts.EXCLUDE_AUTHOR,
    path: Optional[List[str]] = opts.PATH,
    merges: Optional[str] = opts.MERGES,
    identity: Optional[str] = opts.IDENTITY,
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    When commits happen: a weekday by hour-of-day heatmap (UTC).

    [bold cyan]Examples:[/bold cyan]

      commit-stats activity

      commit-stats activity --author alice@example.com --json
    """
    config = get_config(ctx)
    try:
        criteria = build_criteria(config, branch, since, until, author, exclude_author, path, merges)
        heatmap = activity_heatmap(open_stream(ctx, criteria), identity=identity or config.identity)
    except (CommitStatsError, ValueError) as e:
        raise fail(e)

    if json_output:
        data = {
            "total": heatmap.total.to_dict(),
            "authors": {str(a): grid.to_dict() for a, grid in sorted(heatmap.by_author.items())},
        }
        print(json.dumps(data, indent=2))
        return

    grid = heatmap.total
    peak = int(grid.commits.max()) if grid.total_commits else 0
    table = Table(title="Commit activity (UTC)", show_lines=False, pad_edge=False, box=None)
    table.add_column("")
    for hour in range(24):
        table.add_column(f"{hour:02d}", justify="center")
    table.add_column("Total", justify="right", style="cyan")

    per_weekday = grid.per_weekday()
    for weekday in range(7):
        cells = []
        for hour in range(24):
            count = int(grid.commits[weekday, hour])
            level = 0 if not peak else -(-count * (len(_SHADES) - 1) // peak)
            cells.append(f"[green]{_SHADES[level] * 2}[/green]")
        table.add_row(heatmap.weekday_name(weekday)[:3], *cells, str(int(per_weekday[weekday])))

    console.print()
    console.print(table)
    busiest = grid.busiest_slot()
    if busiest is not None:
        weekday, hour = busiest
        console.print(
            f"Busiest slot: [bold]{heatmap.weekday_name(weekday)} {hour:02d}:00[/bold] "
            f"({int(grid.commits[weekday, hour])} commits)"
        )
    console.print()
