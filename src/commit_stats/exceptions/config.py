"""Configuration exceptions: settings files and filter criteria."""

from typing import Any

from .base import CommitStatsError


class ConfigurationError(CommitStatsError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class InvalidCriteriaError(ConfigurationError):
    """Raised when commit filter criteria are malformed."""

    def __init__(self, reason: str, **details: str):
        super().__init__(f"Invalid filter criteria: {reason}", details=dict(details))
        self.reason = reason


class InvalidRangeError(InvalidCriteriaError):
    """Raised when a date range starts after it ends."""

    def __init__(self, since: Any, until: Any):
        super().__init__(
            "date range starts after it ends",
            since=str(since),
            until=str(until),
        )
        self.since = since
        self.until = until
