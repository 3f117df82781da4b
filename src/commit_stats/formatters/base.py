"""Base formatter interface for commit-stats output rendering."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..aggregation import AggregatedStat, GroupKey
from ..models import Author


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> None:
        """Render entries to stdout."""

    @abstractmethod
    def format(self, entries: List[AggregatedStat], group_key: GroupKey, title: Optional[str] = None) -> str:
        """Return formatted string representation of entries."""


def stat_to_dict(stat: AggregatedStat, group_key: GroupKey) -> Dict[str, Any]:
    """Flat, JSON-safe representation of one entry."""
    row: Dict[str, Any] = {group_key.kind.value: group_key.format_value(stat.key)}
    if isinstance(stat.key, Author):
        row["name"] = stat.key.name
        row["email"] = stat.key.email
    row.update(
        {
            "commits": stat.commits_count,
            "lines_added": stat.stats.lines_added,
            "lines_removed": stat.stats.lines_removed,
            "lines_net": stat.stats.lines_net,
            "files_changed": stat.stats.files_changed,
        }
    )
    return row
