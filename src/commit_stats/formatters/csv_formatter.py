"""CSV formatter for commit-stats."""

import csv
import io
from typing import List, Optional

from ..aggregation import AggregatedStat, GroupKey
from .base import BaseFormatter, stat_to_dict


class CsvFormatter(BaseFormatter):
    """Render entries as CSV with a header row."""

    def render(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> None:
        print(self.format(entries, group_key, title), end="")

    def format(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> str:
        output = io.StringIO()
        rows = [stat_to_dict(s, group_key) for s in entries]
        fieldnames = list(rows[0]) if rows else [group_key.kind.value, "commits", "lines_added",
                                                  "lines_removed", "lines_net", "files_changed"]
        writer = csv.DictWriter(output, fieldnames=fieldnames, lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)
        return output.getvalue()
