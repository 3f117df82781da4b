"""Aggregation engine: grouping keys, folds and activity heatmaps."""

from .activity import ActivityHeatmap, HeatmapGrid, activity_heatmap
from .engine import (
    AggregatedStat,
    aggregate,
    aggregate_many,
    aggregate_nested,
    aggregate_parallel,
    author_details,
    merge_aggregates,
)
from .identity import IdentityPolicy, build_resolver
from .keys import Granularity, GroupBy, GroupKey, TimeBucket, natural_order

__all__ = [
    "ActivityHeatmap",
    "AggregatedStat",
    "Granularity",
    "GroupBy",
    "GroupKey",
    "HeatmapGrid",
    "IdentityPolicy",
    "TimeBucket",
    "activity_heatmap",
    "aggregate",
    "aggregate_many",
    "aggregate_nested",
    "aggregate_parallel",
    "author_details",
    "build_resolver",
    "merge_aggregates",
    "natural_order",
]
