"""Commit filter criteria passed into a commit stream.

A criteria object is validated when it is built and is immutable afterwards,
so one traversal always runs under a single merge and diff-error policy.

Example:
    >>> criteria = CommitFilterCriteria(
    ...     since=date(2024, 1, 1),
    ...     until=date(2024, 3, 31),
    ...     ref="main",
    ...     merges=MergeInclusion.EXCLUDE,
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from .exceptions import InvalidCriteriaError, InvalidRangeError
from .models import Author, CommitRecord, FileChange, utc_datetime

DateBound = Union[date, datetime]


class MergeInclusion(str, Enum):
    """Which commits to keep by parent count."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    ONLY = "only"


class MergeDiffPolicy(str, Enum):
    """How a merge commit's lines are counted.

    SKIP keeps merges as zero-stat records so their lines, already counted in
    each parent's own history, are not counted twice.
    """

    SKIP = "skip"
    FIRST_PARENT = "first-parent"


class DiffErrorPolicy(str, Enum):
    """What happens when the diff of one commit cannot be computed."""

    SKIP = "skip"  # keep the commit with zero stats, flag it as skipped
    RAISE = "raise"  # abort the whole traversal


class CommitOrder(str, Enum):
    NEWEST_FIRST = "newest-first"
    OLDEST_FIRST = "oldest-first"


def _lower_bound(value: Optional[DateBound]) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return utc_datetime(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _upper_bound(value: Optional[DateBound]) -> Optional[datetime]:
    """Inclusive upper bound; a plain date covers the whole UTC day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return utc_datetime(value)
    return datetime.combine(value + timedelta(days=1), time.min, tzinfo=timezone.utc) - timedelta(
        microseconds=1
    )


def _normalize_path(path: str) -> str:
    path = path.replace("\\", "/").strip()
    while path.startswith("./"):
        path = path[2:]
    return path.rstrip("/")


@dataclass(frozen=True)
class CommitFilterCriteria:
    """Filters and policies for one commit traversal.

    Attributes:
        authors: Keep only commits whose author matches one of these
            (name, email, or ``Name <email>``, case-insensitive).
        exclude_authors: Drop commits whose author matches one of these.
            Cannot be combined with ``authors``.
        since / until: Inclusive bounds. A ``date`` covers the whole UTC day;
            naive ``datetime`` values are read as UTC.
        paths: Keep only commits touching these files or directories. The
            change record of a kept commit is narrowed to the matching files.
        ref: Branch, tag or commit to walk from. ``None`` walks all refs.
        merges: Merge-commit inclusion.
        merge_diff: How merge commits are diffed.
        on_diff_error: Failure policy for per-commit diffs.
        order: Traversal order of the produced records.
        max_commits: Stop after this many matching records.
    """

    authors: tuple[str, ...] = ()
    exclude_authors: tuple[str, ...] = ()
    since: Optional[DateBound] = None
    until: Optional[DateBound] = None
    paths: tuple[str, ...] = ()
    ref: Optional[str] = None
    merges: MergeInclusion = MergeInclusion.INCLUDE
    merge_diff: MergeDiffPolicy = MergeDiffPolicy.SKIP
    on_diff_error: DiffErrorPolicy = DiffErrorPolicy.SKIP
    order: CommitOrder = CommitOrder.NEWEST_FIRST
    max_commits: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "authors", _as_tuple(self.authors))
        object.__setattr__(self, "exclude_authors", _as_tuple(self.exclude_authors))
        object.__setattr__(
            self, "paths", tuple(p for p in (_normalize_path(p) for p in _as_tuple(self.paths)) if p)
        )
        for name, enum_type in (
            ("merges", MergeInclusion),
            ("merge_diff", MergeDiffPolicy),
            ("on_diff_error", DiffErrorPolicy),
            ("order", CommitOrder),
        ):
            value = getattr(self, name)
            try:
                object.__setattr__(self, name, enum_type(value))
            except ValueError:
                raise InvalidCriteriaError(f"unknown {name} value", **{name: str(value)})
        for name in ("since", "until"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, date):
                raise InvalidCriteriaError(f"{name} must be a date or datetime", **{name: repr(value)})
        self.validate()

    def validate(self) -> None:
        """Raise if the criteria cannot describe a traversal."""
        if self.authors and self.exclude_authors:
            raise InvalidCriteriaError("cannot specify both authors and exclude_authors")
        if self.max_commits is not None and self.max_commits < 1:
            raise InvalidCriteriaError("max_commits must be at least 1", max_commits=str(self.max_commits))
        if self.ref is not None and not self.ref.strip():
            raise InvalidCriteriaError("ref must not be empty")
        lower, upper = self.lower_bound, self.upper_bound
        if lower is not None and upper is not None and lower > upper:
            raise InvalidRangeError(self.since, self.until)

    @property
    def lower_bound(self) -> Optional[datetime]:
        return _lower_bound(self.since)

    @property
    def upper_bound(self) -> Optional[datetime]:
        return _upper_bound(self.until)

    @property
    def newest_first(self) -> bool:
        return self.order is CommitOrder.NEWEST_FIRST

    def in_range(self, timestamp: datetime) -> bool:
        lower, upper = self.lower_bound, self.upper_bound
        if lower is not None and timestamp < lower:
            return False
        if upper is not None and timestamp > upper:
            return False
        return True

    def accepts_parent_count(self, parent_count: int) -> bool:
        is_merge = parent_count > 1
        if self.merges is MergeInclusion.EXCLUDE:
            return not is_merge
        if self.merges is MergeInclusion.ONLY:
            return is_merge
        return True

    def matches_author(self, author: Author) -> bool:
        if self.authors:
            return any(_author_matches(p, author) for p in self.authors)
        if self.exclude_authors:
            return not any(_author_matches(p, author) for p in self.exclude_authors)
        return True

    def matches_path(self, change: FileChange) -> bool:
        if not self.paths:
            return True
        candidates = [change.path] + ([change.old_path] if change.old_path else [])
        return any(
            c == p or c.startswith(p + "/") for c in candidates for p in self.paths
        )

    def narrow(self, record: CommitRecord) -> Optional[CommitRecord]:
        """Restrict a record to the configured paths; ``None`` if it touches none."""
        if not self.paths:
            return record
        from .history.summarizer import summarize_files

        kept = [f for f in record.files if self.matches_path(f)]
        if not kept:
            return None
        summary = summarize_files(kept)
        return CommitRecord(
            hash=record.hash,
            author=record.author,
            timestamp=record.timestamp,
            parent_count=record.parent_count,
            stats=summary.stats,
            files=summary.files,
            subject=record.subject,
            diff_skipped=record.diff_skipped,
        )

    def __str__(self) -> str:
        parts = []
        if self.authors:
            parts.append(f"authors:{','.join(self.authors)}")
        if self.exclude_authors:
            parts.append(f"exclude authors:{','.join(self.exclude_authors)}")
        if self.merges is not MergeInclusion.INCLUDE:
            parts.append(f"merges:{self.merges.value}")
        if self.ref:
            parts.append(f"ref:{self.ref}")
        if self.since is not None:
            parts.append(f"since:{self.since.isoformat()}")
        if self.until is not None:
            parts.append(f"until:{self.until.isoformat()}")
        if self.paths:
            parts.append(f"paths:{','.join(self.paths)}")
        return ", ".join(parts)


def _as_tuple(value) -> tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _author_matches(pattern: str, author: Author) -> bool:
    needle = pattern.strip().casefold()
    if not needle:
        return False
    if "<" in needle:
        try:
            wanted = Author.parse(pattern)
        except InvalidCriteriaError:
            return False
        name_ok = not wanted.name or wanted.name.casefold() == author.name.casefold()
        email_ok = not wanted.email or wanted.email.casefold() == author.email.casefold()
        return name_ok and email_ok
    return needle in (author.name.casefold(), author.email.casefold())
