"""Fold commit records into grouped statistics.

Every aggregation is a single linear pass. Each record contributes one
``(group value, ChangeStats)`` pair per grouping, except ``FILE_PATH`` which
contributes one pair per touched file, so a commit touching three files bumps
three path counters by one commit each.

Results are plain dicts keyed by group value; their order carries no
meaning. Use ``commit_stats.view`` for ordered output.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from ..history.stream import CancelCheck, as_cancel_check
from ..exceptions import TraversalCancelledError
from ..logging_config import get_logger
from ..models import Author, ChangeStats, CommitRecord, FileChange
from .identity import Identity, IdentityPolicy, build_resolver
from .keys import GroupBy, GroupKey, TimeBucket

logger = get_logger(__name__)

# Default worker count: CPU count, capped at 8
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)
# Below this many records a parallel fold is not worth the thread start-up
_MIN_PARALLEL_RECORDS = 1000


@dataclass(frozen=True)
class AggregatedStat:
    """Accumulated stats and commit count for one group value."""

    key: Any
    stats: ChangeStats
    commits_count: int

    def merge(self, other: AggregatedStat) -> AggregatedStat:
        if other.key != self.key:
            raise ValueError(f"cannot merge stats of {self.key!r} and {other.key!r}")
        return AggregatedStat(
            key=self.key,
            stats=self.stats + other.stats,
            commits_count=self.commits_count + other.commits_count,
        )

    @property
    def lines_added(self) -> int:
        return self.stats.lines_added

    @property
    def lines_removed(self) -> int:
        return self.stats.lines_removed

    @property
    def lines_net(self) -> int:
        return self.stats.lines_net

    @property
    def files_changed(self) -> int:
        return self.stats.files_changed

    def __str__(self) -> str:
        return f"{self.key}: total commits: {self.commits_count}, {self.stats}"


class _Fold:
    """Mutable accumulator keyed by a tuple of group values."""

    __slots__ = ("keys", "counters")

    def __init__(self, keys: Sequence[GroupKey]):
        self.keys = tuple(keys)
        self.counters: dict[tuple, list[int]] = {}

    def add(self, record: CommitRecord) -> None:
        for values, stats in _contributions(record, self.keys):
            counter = self.counters.get(values)
            if counter is None:
                self.counters[values] = [stats.lines_added, stats.lines_removed, stats.files_changed, 1]
            else:
                counter[0] += stats.lines_added
                counter[1] += stats.lines_removed
                counter[2] += stats.files_changed
                counter[3] += 1

    def absorb(self, other: _Fold) -> None:
        for values, (added, removed, files, commits) in other.counters.items():
            counter = self.counters.setdefault(values, [0, 0, 0, 0])
            counter[0] += added
            counter[1] += removed
            counter[2] += files
            counter[3] += commits

    def coalesce(self, identity: Identity) -> _Fold:
        """Rewrite author positions through the identity policy."""
        positions = [i for i, key in enumerate(self.keys) if key.kind is GroupBy.AUTHOR]
        if not positions or identity == IdentityPolicy.EXACT:
            return self
        resolvers = {
            i: build_resolver(identity, (values[i] for values in self.counters)) for i in positions
        }
        merged = _Fold(self.keys)
        for values, counter in self.counters.items():
            canonical = tuple(
                resolvers[i](value) if i in resolvers else value for i, value in enumerate(values)
            )
            target = merged.counters.setdefault(canonical, [0, 0, 0, 0])
            for j in range(4):
                target[j] += counter[j]
        return merged

    def items(self) -> Iterator[tuple[tuple, AggregatedStat]]:
        for values, (added, removed, files, commits) in self.counters.items():
            yield values, AggregatedStat(
                key=values[-1],
                stats=ChangeStats(added, removed, files),
                commits_count=commits,
            )


def _key_value(key: GroupKey, record: CommitRecord, change: Optional[FileChange]) -> Any:
    kind = key.kind
    if kind is GroupBy.AUTHOR:
        return record.author
    if kind is GroupBy.FILE_PATH:
        return change.path
    if kind is GroupBy.TIME_BUCKET:
        return TimeBucket.containing(record.timestamp, key.granularity)
    if kind is GroupBy.WEEKDAY:
        return record.timestamp.weekday()
    if kind is GroupBy.HOUR_OF_DAY:
        return record.timestamp.hour
    raise ValueError(f"unsupported grouping: {kind}")


def _contributions(record: CommitRecord, keys: Sequence[GroupKey]):
    if any(key.is_per_file for key in keys):
        for change in record.files:
            yield tuple(_key_value(key, record, change) for key in keys), change.stats
    else:
        yield tuple(_key_value(key, record, None) for key in keys), record.stats


def _run_folds(
    records: Iterable[CommitRecord],
    folds: Sequence[_Fold],
    should_cancel: CancelCheck = None,
) -> int:
    cancelled = as_cancel_check(should_cancel)
    count = 0
    for record in records:
        if cancelled():
            raise TraversalCancelledError(count)
        for fold in folds:
            fold.add(record)
        count += 1
    return count


def aggregate(
    records: Iterable[CommitRecord],
    group_key: GroupKey,
    identity: Identity = IdentityPolicy.EXACT,
    should_cancel: CancelCheck = None,
) -> dict[Any, AggregatedStat]:
    """Group ``records`` by ``group_key``.

    An empty input gives an empty dict. ``identity`` only affects author
    grouping. On cancellation ``TraversalCancelledError`` is raised and no
    partial result is returned.
    """
    fold = _Fold((group_key,))
    count = _run_folds(records, (fold,), should_cancel)
    logger.debug("Aggregated %d records by %s into %d groups", count, group_key, len(fold.counters))
    return {stat.key: stat for _, stat in fold.coalesce(identity).items()}


def aggregate_many(
    records: Iterable[CommitRecord],
    keys: Iterable[GroupKey],
    identity: Identity = IdentityPolicy.EXACT,
    should_cancel: CancelCheck = None,
) -> dict[GroupKey, dict[Any, AggregatedStat]]:
    """Aggregate by several groupings in one pass over ``records``."""
    keys = list(dict.fromkeys(keys))
    folds = [_Fold((key,)) for key in keys]
    _run_folds(records, folds, should_cancel)
    return {
        key: {stat.key: stat for _, stat in fold.coalesce(identity).items()}
        for key, fold in zip(keys, folds)
    }


def aggregate_nested(
    records: Iterable[CommitRecord],
    outer: GroupKey,
    inner: GroupKey,
    identity: Identity = IdentityPolicy.EXACT,
    should_cancel: CancelCheck = None,
) -> dict[Any, dict[Any, AggregatedStat]]:
    """Two-level breakdown, e.g. per month then per author.

    When either level is ``FILE_PATH`` both levels are computed per touched
    file.
    """
    if outer == inner:
        raise ValueError("outer and inner groupings must differ")
    fold = _Fold((outer, inner))
    _run_folds(records, (fold,), should_cancel)
    result: dict[Any, dict[Any, AggregatedStat]] = {}
    for (outer_value, _), stat in fold.coalesce(identity).items():
        result.setdefault(outer_value, {})[stat.key] = stat
    return result


def aggregate_parallel(
    records: Iterable[CommitRecord],
    group_key: GroupKey,
    workers: Optional[int] = None,
    identity: Identity = IdentityPolicy.EXACT,
    should_cancel: CancelCheck = None,
) -> dict[Any, AggregatedStat]:
    """Same result as ``aggregate`` using a fixed pool of worker threads.

    The records are materialized and cut into one contiguous slice per
    worker. Each worker folds its slice independently and the partial
    results are merged once at the end; identities are resolved after the
    merge.
    """
    items = records if isinstance(records, Sequence) else list(records)
    if workers is None:
        workers = _DEFAULT_WORKERS
    if workers < 1:
        raise ValueError("workers must be at least 1")
    if workers == 1 or len(items) < _MIN_PARALLEL_RECORDS:
        return aggregate(items, group_key, identity=identity, should_cancel=should_cancel)

    size = -(-len(items) // workers)
    slices = [items[i : i + size] for i in range(0, len(items), size)]

    def fold_slice(chunk: Sequence[CommitRecord]) -> _Fold:
        fold = _Fold((group_key,))
        _run_folds(chunk, (fold,), should_cancel)
        return fold

    logger.debug("Folding %d records in %d slices", len(items), len(slices))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        partials = list(executor.map(fold_slice, slices))

    merged = _Fold((group_key,))
    for partial in partials:
        merged.absorb(partial)
    return {stat.key: stat for _, stat in merged.coalesce(identity).items()}


def merge_aggregates(mappings: Iterable[Mapping[Any, AggregatedStat]]) -> dict[Any, AggregatedStat]:
    """Combine partial results produced over disjoint sets of commits."""
    result: dict[Any, AggregatedStat] = {}
    for mapping in mappings:
        for key, stat in mapping.items():
            current = result.get(key)
            result[key] = stat if current is None else current.merge(stat)
    return result


def author_details(records: Iterable[CommitRecord]) -> dict[Author, list[CommitRecord]]:
    """Commits of each author, in input order."""
    result: dict[Author, list[CommitRecord]] = {}
    for record in records:
        result.setdefault(record.author, []).append(record)
    return result
