"""JSON formatter for commit-stats."""

import json
from typing import List, Optional

from ..aggregation import AggregatedStat, GroupKey
from .base import BaseFormatter, stat_to_dict


class JsonFormatter(BaseFormatter):
    """Render entries as a JSON array."""

    def render(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> None:
        print(self.format(entries, group_key, title))

    def format(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> str:
        return json.dumps([stat_to_dict(s, group_key) for s in entries], indent=2)
