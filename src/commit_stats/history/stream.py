"""Lazy, filtered commit traversal.

A ``CommitStream`` pulls raw commits from a backend one at a time, applies the
criteria while walking, summarizes each surviving commit's diff and yields a
``CommitRecord``. Nothing is buffered, and iterating the stream again walks
the repository again.

Usage:
    repo = open_repository("/path/to/repo")
    stream = CommitStream(repo, CommitFilterCriteria(ref="main"))
    by_author = aggregate(stream, GroupKey.author())
    by_month = aggregate(stream, GroupKey.time_bucket(Granularity.MONTH))
"""

from __future__ import annotations

import threading
from typing import Callable, Iterator, Optional, Union

from ..criteria import CommitFilterCriteria, DiffErrorPolicy, MergeDiffPolicy
from ..exceptions import DiffComputationError, TraversalCancelledError
from ..git.backend import RawCommit, RepositoryBackend
from ..logging_config import get_logger
from ..models import Author, CommitRecord, utc_datetime
from .summarizer import summarize_commit

logger = get_logger(__name__)

CancelCheck = Union[Callable[[], bool], threading.Event, None]


def as_cancel_check(should_cancel: CancelCheck) -> Callable[[], bool]:
    """Accept a predicate or anything with ``is_set()`` (e.g. ``threading.Event``)."""
    if should_cancel is None:
        return lambda: False
    is_set = getattr(should_cancel, "is_set", None)
    if callable(is_set):
        return is_set
    return should_cancel


class CommitStream:
    """Re-iterable sequence of ``CommitRecord`` matching some criteria.

    The ref is resolved and the criteria validated on construction, so
    ``RepositoryAccessError`` and ``InvalidCriteriaError`` surface before any
    traversal starts.

    Attributes:
        skipped: Hashes whose diff failed and was skipped during the most
            recent traversal (``DiffErrorPolicy.SKIP`` only).
    """

    def __init__(
        self,
        backend: RepositoryBackend,
        criteria: Optional[CommitFilterCriteria] = None,
        should_cancel: CancelCheck = None,
    ):
        self.backend = backend
        self.criteria = criteria or CommitFilterCriteria()
        self.criteria.validate()
        self._cancelled = as_cancel_check(should_cancel)
        self._start = backend.resolve_ref(self.criteria.ref) if self.criteria.ref else None
        self.skipped: list[str] = []

    def __iter__(self) -> Iterator[CommitRecord]:
        return self._traverse()

    def _traverse(self) -> Iterator[CommitRecord]:
        criteria = self.criteria
        skipped: list[str] = []
        self.skipped = skipped
        walked = 0
        produced = 0

        logger.info("Walking commits from %s (%s)", criteria.ref or "all refs", str(criteria) or "no filters")
        for raw in self.backend.iter_commits(self._start, newest_first=criteria.newest_first):
            if self._cancelled():
                logger.warning("Traversal cancelled after %d commits", walked)
                raise TraversalCancelledError(walked)
            walked += 1

            if not criteria.accepts_parent_count(len(raw.parents)):
                continue
            timestamp = utc_datetime(raw.timestamp)
            if not criteria.in_range(timestamp):
                continue
            author = Author(name=raw.author_name, email=raw.author_email)
            if not criteria.matches_author(author):
                continue

            record = criteria.narrow(self._build_record(raw, author, skipped))
            if record is None:
                continue

            yield record
            produced += 1
            if criteria.max_commits is not None and produced >= criteria.max_commits:
                break

        if skipped:
            logger.warning("Skipped diffs of %d commits", len(skipped))
        logger.info("Walked %d commits, produced %d records", walked, produced)

    def _build_record(self, raw: RawCommit, author: Author, skipped: list[str]) -> CommitRecord:
        criteria = self.criteria
        diff_skipped = raw.is_merge and criteria.merge_diff is MergeDiffPolicy.SKIP
        try:
            summary = summarize_commit(self.backend, raw, criteria.merge_diff)
        except DiffComputationError as e:
            if criteria.on_diff_error is DiffErrorPolicy.RAISE:
                raise
            logger.warning("Counting %s without line stats: %s", raw.hash[:12], e)
            skipped.append(raw.hash)
            return CommitRecord(
                hash=raw.hash,
                author=author,
                timestamp=raw.timestamp,
                parent_count=len(raw.parents),
                subject=raw.subject,
                diff_skipped=True,
            )
        return CommitRecord(
            hash=raw.hash,
            author=author,
            timestamp=raw.timestamp,
            parent_count=len(raw.parents),
            stats=summary.stats,
            files=summary.files,
            subject=raw.subject,
            diff_skipped=diff_skipped,
        )


def list_commits(
    backend: RepositoryBackend,
    criteria: Optional[CommitFilterCriteria] = None,
    should_cancel: CancelCheck = None,
) -> Iterator[CommitRecord]:
    """Validate eagerly, then return a lazy iterator over matching commits."""
    return iter(CommitStream(backend, criteria, should_cancel=should_cancel))
