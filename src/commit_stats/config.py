"""Configuration loading and management for commit-stats.

Configuration sources are merged in priority order:
    1. Defaults (defined in StatsConfig)
    2. Global config (~/.commit-stats.toml)
    3. Project config (./commit-stats.toml)
    4. Explicit config file
    5. Environment variables (COMMIT_STATS_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(top=10, granularity="week")
    >>> config.top
    10
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

_CHOICES = {
    "merges": ("include", "exclude", "only"),
    "merge_diff": ("skip", "first-parent"),
    "on_diff_error": ("skip", "raise"),
    "identity": ("exact", "email", "name", "alias"),
    "granularity": ("day", "week", "month", "year"),
    "sort_key": ("commits", "lines-added", "lines-removed", "lines-net", "files-changed"),
    "order": ("asc", "desc"),
    "verbosity": ("quiet", "normal", "verbose"),
}

_ENV_PREFIX = "COMMIT_STATS_"


@dataclass(frozen=True)
class StatsConfig:
    """Defaults for traversal, aggregation and display.

    Attributes:
        Repository access:
            git_executable: git binary to run
            git_timeout_seconds: Timeout for a single git invocation
            default_branch: Ref to walk when none is given (None = all refs)

        Traversal policy:
            merges: include | exclude | only
            merge_diff: skip | first-parent
            on_diff_error: skip | raise
            max_commits: Stop after this many matching commits (0 = unlimited)

        Aggregation:
            identity: exact | email | name | alias
            granularity: Time bucket size for timelines
            workers: Worker threads for parallel folds (None = single thread)

        Output control:
            sort_key: Default metric to sort by
            order: asc | desc
            top: Rows to show (0 = all)
            verbosity: Logging verbosity level
    """

    # Repository access
    git_executable: str = "git"
    git_timeout_seconds: int = 60
    default_branch: Optional[str] = None

    # Traversal policy
    merges: str = "include"
    merge_diff: str = "skip"
    on_diff_error: str = "skip"
    max_commits: int = 0

    # Aggregation
    identity: str = "exact"
    granularity: str = "month"
    workers: Optional[int] = None

    # Output control
    sort_key: str = "commits"
    order: str = "desc"
    top: int = 0
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for key, choices in _CHOICES.items():
            value = getattr(self, key)
            if value not in choices:
                raise InvalidConfigError(key, value, f"expected one of {', '.join(choices)}")

        if self.git_timeout_seconds < 1:
            raise InvalidConfigError("git_timeout_seconds", self.git_timeout_seconds, "must be at least 1")
        if self.max_commits < 0:
            raise InvalidConfigError("max_commits", self.max_commits, "must be non-negative")
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.top < 0:
            raise InvalidConfigError("top", self.top, "must be non-negative")


def load_config(config_file: Optional[Path] = None, **overrides) -> StatsConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored

    Returns:
        Validated StatsConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".commit-stats.toml"
    if global_config.exists():
        merged.update(_load_toml_section(global_config))

    project_config = Path.cwd() / "commit-stats.toml"
    if project_config.exists():
        merged.update(_load_toml_section(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_section(config_file))

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return StatsConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from COMMIT_STATS_* environment variables.

    Every StatsConfig field can be set, e.g. COMMIT_STATS_TOP=10 or
    COMMIT_STATS_MERGES=exclude.
    """
    type_hints = get_type_hints(StatsConfig)
    result: dict[str, Any] = {}

    for field_name in StatsConfig.__dataclass_fields__:
        env_key = f"{_ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hints[field_name])
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        if value == "" or value.lower() == "none":
            return None
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_section(path: Path) -> dict:
    """Read a TOML file; settings may sit at top level or under [commit-stats]."""
    try:
        data = _load_toml_file(path)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
    section = data.get("commit-stats", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid config file '{path}': [commit-stats] must be a table")
    return {k.replace("-", "_"): v for k, v in section.items()}


def _load_toml_file(path: Path) -> dict:
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        # Python 3.10 uses the tomli backport declared in setup.py
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
