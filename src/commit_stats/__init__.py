"""
commit-stats - commit history statistics for git repositories

Walks a repository's history and folds it into per-author, per-file and
per-period counts of commits and changed lines.
"""

__version__ = "0.1.0"

from .aggregation import (
    AggregatedStat,
    Granularity,
    GroupKey,
    IdentityPolicy,
    TimeBucket,
    activity_heatmap,
    aggregate,
    aggregate_many,
    aggregate_nested,
    aggregate_parallel,
)
from .criteria import CommitFilterCriteria, CommitOrder, DiffErrorPolicy, MergeDiffPolicy, MergeInclusion
from .exceptions import (
    CommitStatsError,
    DiffComputationError,
    InvalidRangeError,
    RepositoryAccessError,
    TraversalCancelledError,
)
from .git import GitRepository, RepositoryBackend, open_repository
from .history import CommitStream, list_commits
from .models import Author, ChangeStats, CommitRecord, FileChange
from .view import SortKey, SortOrder, author_totals, threshold, timeline, top_n, view

__all__ = [
    "list_commits",  # Main entry points
    "aggregate",
    "view",
    "AggregatedStat",
    "Author",
    "ChangeStats",
    "CommitFilterCriteria",
    "CommitOrder",
    "CommitRecord",
    "CommitStatsError",
    "CommitStream",
    "DiffComputationError",
    "DiffErrorPolicy",
    "FileChange",
    "GitRepository",
    "Granularity",
    "GroupKey",
    "IdentityPolicy",
    "InvalidRangeError",
    "MergeDiffPolicy",
    "MergeInclusion",
    "RepositoryAccessError",
    "RepositoryBackend",
    "SortKey",
    "SortOrder",
    "TimeBucket",
    "TraversalCancelledError",
    "activity_heatmap",
    "aggregate_many",
    "aggregate_nested",
    "aggregate_parallel",
    "author_totals",
    "open_repository",
    "threshold",
    "timeline",
    "top_n",
]
