"""Sorted and filtered projections of aggregated statistics.

Everything here is a pure function over an already-aggregated mapping (or a
sequence previously returned by ``view``); nothing touches the repository.
Ties are always broken by the group value's natural ordering, so output is
reproducible for identical input.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union

from .aggregation.engine import AggregatedStat, aggregate
from .aggregation.identity import Identity, IdentityPolicy
from .aggregation.keys import GroupKey, TimeBucket, natural_order
from .models import ZERO_STATS, CommitRecord

Aggregated = Union[Mapping[Any, AggregatedStat], Iterable[AggregatedStat]]


class SortKey(str, Enum):
    COMMITS = "commits"
    LINES_ADDED = "lines-added"
    LINES_REMOVED = "lines-removed"
    LINES_NET = "lines-net"
    FILES_CHANGED = "files-changed"


class SortOrder(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


def metric(stat: AggregatedStat, key: SortKey | str) -> int:
    """Value of ``key`` for ``stat``."""
    key = SortKey(key)
    if key is SortKey.COMMITS:
        return stat.commits_count
    if key is SortKey.LINES_ADDED:
        return stat.stats.lines_added
    if key is SortKey.LINES_REMOVED:
        return stat.stats.lines_removed
    if key is SortKey.LINES_NET:
        return stat.stats.lines_net
    return stat.stats.files_changed


def _entries(aggregated: Aggregated) -> list[AggregatedStat]:
    if isinstance(aggregated, Mapping):
        return list(aggregated.values())
    return list(aggregated)


def view(
    aggregated: Aggregated,
    sort_key: SortKey | str = SortKey.COMMITS,
    order: Optional[SortOrder | str] = None,
    secondary: Optional[SortKey | str] = None,
) -> list[AggregatedStat]:
    """Sort aggregated entries by a metric.

    Args:
        aggregated: Mapping from ``aggregate`` or a sequence from ``view``.
        sort_key: Primary metric.
        order: Defaults to descending (largest contributors first).
        secondary: Optional metric for ties, sorted in the same direction.

    Remaining ties fall back to the natural ordering of the group values,
    ascending.
    """
    sort_key = SortKey(sort_key)
    descending = SortOrder(order or SortOrder.DESCENDING) is SortOrder.DESCENDING
    entries = _entries(aggregated)
    # Stable sorts: least significant criterion first.
    entries.sort(key=lambda s: natural_order(s.key))
    if secondary is not None:
        secondary = SortKey(secondary)
        entries.sort(key=lambda s: metric(s, secondary), reverse=descending)
    entries.sort(key=lambda s: metric(s, sort_key), reverse=descending)
    return entries


def top_n(
    aggregated: Aggregated,
    n: int,
    sort_key: SortKey | str = SortKey.COMMITS,
    order: Optional[SortOrder | str] = None,
    secondary: Optional[SortKey | str] = None,
) -> list[AggregatedStat]:
    """The first ``n`` entries of ``view``."""
    if n < 0:
        raise ValueError("n must be non-negative")
    return view(aggregated, sort_key, order, secondary)[:n]


def threshold(aggregated: Aggregated, sort_key: SortKey | str, minimum: int) -> Aggregated:
    """Keep entries whose metric is strictly greater than ``minimum``.

    Returns the same shape it was given: a dict for a mapping, a list (in input
    order) for a sequence.
    """
    sort_key = SortKey(sort_key)
    if isinstance(aggregated, Mapping):
        return {k: s for k, s in aggregated.items() if metric(s, sort_key) > minimum}
    return [s for s in aggregated if metric(s, sort_key) > minimum]


def totals(aggregated: Aggregated) -> AggregatedStat:
    """Sum of all entries, under the key ``None``.

    For file grouping the commit count is the number of (commit, file)
    pairs, not the number of commits.
    """
    stats = ZERO_STATS
    commits = 0
    for stat in _entries(aggregated):
        stats = stats + stat.stats
        commits += stat.commits_count
    return AggregatedStat(key=None, stats=stats, commits_count=commits)


def timeline(aggregated: Aggregated, fill_gaps: bool = True) -> list[AggregatedStat]:
    """Time-bucket entries in chronological order.

    With ``fill_gaps`` every bucket between the first and the last observed
    one is present, empty buckets carrying zero stats.
    """
    entries = sorted(_entries(aggregated), key=lambda s: natural_order(s.key))
    if not entries:
        return []
    if not all(isinstance(s.key, TimeBucket) for s in entries):
        raise ValueError("timeline needs time bucket keys")
    granularities = {s.key.granularity for s in entries}
    if len(granularities) > 1:
        raise ValueError("timeline entries mix granularities")
    if not fill_gaps:
        return entries

    by_bucket = {s.key: s for s in entries}
    result = []
    bucket = entries[0].key
    last = entries[-1].key
    while bucket <= last:
        result.append(by_bucket.get(bucket) or AggregatedStat(key=bucket, stats=ZERO_STATS, commits_count=0))
        bucket = bucket.next()
    return result


def author_totals(
    records: Iterable[CommitRecord],
    sort_key: SortKey | str = SortKey.COMMITS,
    order: Optional[SortOrder | str] = None,
    identity: Identity = IdentityPolicy.EXACT,
) -> list[AggregatedStat]:
    """Per-author totals over ``records``, sorted."""
    return view(aggregate(records, GroupKey.author(), identity=identity), sort_key, order)
