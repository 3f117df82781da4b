"""Exception hierarchy for commit-stats."""

from .base import CommitStatsError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidCriteriaError,
    InvalidRangeError,
)
from .repository import (
    DiffComputationError,
    RepositoryAccessError,
    TraversalCancelledError,
)

__all__ = [
    "CommitStatsError",
    "RepositoryAccessError",
    "DiffComputationError",
    "TraversalCancelledError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidCriteriaError",
    "InvalidRangeError",
]
