"""Rich table formatter for commit-stats."""

from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..aggregation import AggregatedStat, GroupKey
from ..view import totals
from .base import BaseFormatter


class RichFormatter(BaseFormatter):
    """Render entries as a colored terminal table with a totals footer."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> None:
        self.console.print()
        self.console.print(self._build_table(entries, group_key, title))
        self.console.print()

    def format(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> str:
        console = Console(width=120, force_terminal=False)
        with console.capture() as capture:
            console.print(self._build_table(entries, group_key, title))
        return capture.get()

    def _build_table(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str]) -> Table:
        table = Table(title=title, show_lines=False, pad_edge=True, show_footer=bool(entries))
        total = totals(entries)
        table.add_column(str(group_key).capitalize(), style="bold", footer="Total")
        table.add_column("Commits", justify="right", style="cyan", footer=str(total.commits_count))
        table.add_column("Added", justify="right", style="green", footer=f"+{total.lines_added}")
        table.add_column("Removed", justify="right", style="red", footer=f"-{total.lines_removed}")
        table.add_column("Net", justify="right", footer=f"{total.lines_net:+d}")
        table.add_column("Files", justify="right", style="yellow", footer=str(total.files_changed))

        for stat in entries:
            net = stat.lines_net
            net_style = "green" if net > 0 else "red" if net < 0 else "dim"
            table.add_row(
                escape(group_key.format_value(stat.key)),
                str(stat.commits_count),
                f"+{stat.lines_added}",
                f"-{stat.lines_removed}",
                f"[{net_style}]{net:+d}[/{net_style}]",
                str(stat.files_changed),
            )
        return table
