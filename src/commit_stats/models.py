"""Value types shared by the commit stream, the aggregation engine and the views."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from .exceptions import InvalidCriteriaError

# Accepts: Name <email>, "Name" <email>, Name, <email>
_AUTHOR_RE = re.compile(r'^\s*(?:"?(?P<name>[^"<]*?)"?\s*)?(?:<(?P<email>[^<>]*)>)?\s*$')


@dataclass(frozen=True, order=True)
class Author:
    """Commit author identity.

    Equality is exact on both attributes. Fuzzier notions of identity are an
    aggregation option (see ``IdentityPolicy``), never part of the value.
    Natural ordering is ``(name, email)``.
    """

    name: str
    email: str = ""

    @classmethod
    def parse(cls, value: str) -> Author:
        """Parse ``Name <email>`` (or a bare name / bare ``<email>``)."""
        match = _AUTHOR_RE.match(value)
        if match is None:
            raise InvalidCriteriaError("cannot parse author", author=value)
        name = (match.group("name") or "").strip()
        email = (match.group("email") or "").strip()
        if not email and "@" in name and " " not in name:
            name, email = "", name
        if not name and not email:
            raise InvalidCriteriaError("author string is empty", author=value)
        return cls(name=name, email=email)

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"


@dataclass(frozen=True)
class DiffEntry:
    """One hunk as reported by the diff capability."""

    path: str
    lines_added: int
    lines_removed: int
    kind: ChangeKind = ChangeKind.MODIFIED
    old_path: Optional[str] = None  # renames and copies only
    binary: bool = False


@dataclass(frozen=True)
class FileChange:
    """Per-file row of a commit's change record."""

    path: str
    lines_added: int = 0
    lines_removed: int = 0
    kind: ChangeKind = ChangeKind.MODIFIED
    old_path: Optional[str] = None
    binary: bool = False

    @property
    def stats(self) -> ChangeStats:
        return ChangeStats(self.lines_added, self.lines_removed, 1)


@dataclass(frozen=True)
class ChangeStats:
    """Line and file counters. ``+`` is the associative, commutative fold."""

    lines_added: int = 0
    lines_removed: int = 0
    files_changed: int = 0

    def __post_init__(self) -> None:
        for name in ("lines_added", "lines_removed", "files_changed"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    def __add__(self, other: ChangeStats) -> ChangeStats:
        if not isinstance(other, ChangeStats):
            return NotImplemented
        return ChangeStats(
            lines_added=self.lines_added + other.lines_added,
            lines_removed=self.lines_removed + other.lines_removed,
            files_changed=self.files_changed + other.files_changed,
        )

    def merge(self, other: ChangeStats) -> ChangeStats:
        return self + other

    @property
    def lines_net(self) -> int:
        return self.lines_added - self.lines_removed

    @classmethod
    def sum(cls, items: Iterable[ChangeStats]) -> ChangeStats:
        added = removed = files = 0
        for item in items:
            added += item.lines_added
            removed += item.lines_removed
            files += item.files_changed
        return cls(added, removed, files)

    def __str__(self) -> str:
        return (
            f"files changed: {self.files_changed}, lines added: {self.lines_added}, "
            f"lines removed: {self.lines_removed}"
        )


ZERO_STATS = ChangeStats()


def utc_datetime(value: int | float | datetime) -> datetime:
    """Normalize a unix timestamp or datetime to an aware UTC datetime.

    Naive datetimes are taken to already be in UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.fromtimestamp(value, tz=timezone.utc)


@dataclass(frozen=True)
class CommitRecord:
    """One commit as produced by the commit stream."""

    hash: str
    author: Author
    timestamp: datetime
    parent_count: int
    stats: ChangeStats = ZERO_STATS
    files: tuple[FileChange, ...] = field(default=())
    subject: str = ""
    diff_skipped: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", utc_datetime(self.timestamp))
        object.__setattr__(self, "files", tuple(self.files))
        if self.parent_count < 0:
            raise ValueError("parent_count must be non-negative")

    @property
    def is_root(self) -> bool:
        return self.parent_count == 0

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1

    @property
    def date(self) -> date:
        return self.timestamp.date()

    def __str__(self) -> str:
        return f"{self.hash[:12]}, author: {self.author}, {self.timestamp.isoformat()}, {self.stats}"
