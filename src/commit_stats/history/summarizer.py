"""Turn a commit's diff into a normalized change record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..criteria import MergeDiffPolicy
from ..exceptions import DiffComputationError
from ..git.backend import RawCommit, RepositoryBackend
from ..models import ChangeKind, ChangeStats, DiffEntry, FileChange, ZERO_STATS


@dataclass(frozen=True)
class DiffSummary:
    stats: ChangeStats
    files: tuple[FileChange, ...]


EMPTY_SUMMARY = DiffSummary(stats=ZERO_STATS, files=())


def summarize_diff(entries: Iterable[DiffEntry]) -> DiffSummary:
    """Fold per-file hunks into one ``DiffSummary``.

    Hunks sharing a path collapse into a single file entry, so
    ``files_changed`` is the number of distinct paths. A rename counts as one
    change of its new path. Binary files count as changed files with zero
    lines.

    Raises:
        DiffComputationError: if a hunk reports negative line counts.
    """
    by_path: dict[str, FileChange] = {}
    for entry in entries:
        if entry.lines_added < 0 or entry.lines_removed < 0:
            raise DiffComputationError(
                "", f"negative line count for {entry.path}"
            )
        added = 0 if entry.binary else entry.lines_added
        removed = 0 if entry.binary else entry.lines_removed
        current = by_path.get(entry.path)
        if current is None:
            by_path[entry.path] = FileChange(
                path=entry.path,
                lines_added=added,
                lines_removed=removed,
                kind=entry.kind,
                old_path=entry.old_path,
                binary=entry.binary,
            )
        else:
            by_path[entry.path] = FileChange(
                path=entry.path,
                lines_added=current.lines_added + added,
                lines_removed=current.lines_removed + removed,
                kind=_combine_kinds(current.kind, entry.kind),
                old_path=current.old_path or entry.old_path,
                binary=current.binary or entry.binary,
            )
    return summarize_files(by_path.values())


def summarize_files(files: Iterable[FileChange]) -> DiffSummary:
    """Build a summary from already-normalized file rows."""
    ordered = tuple(sorted(files, key=lambda f: f.path))
    stats = ChangeStats(
        lines_added=sum(f.lines_added for f in ordered),
        lines_removed=sum(f.lines_removed for f in ordered),
        files_changed=len(ordered),
    )
    return DiffSummary(stats=stats, files=ordered)


def summarize_commit(
    backend: RepositoryBackend,
    commit: RawCommit,
    merge_diff: MergeDiffPolicy = MergeDiffPolicy.SKIP,
) -> DiffSummary:
    """Diff ``commit`` according to its shape and summarize it.

    Root commits are diffed against the empty tree. Merge commits yield an
    empty summary under ``MergeDiffPolicy.SKIP`` and are diffed against their
    first parent under ``FIRST_PARENT``.
    """
    if commit.is_merge and merge_diff is MergeDiffPolicy.SKIP:
        return EMPTY_SUMMARY
    parent = commit.parents[0] if commit.parents else None
    try:
        return summarize_diff(backend.diff(commit.hash, parent))
    except DiffComputationError as e:
        if e.commit:
            raise
        raise DiffComputationError(commit.hash, e.reason, parent=parent)


def _combine_kinds(first: ChangeKind, second: ChangeKind) -> ChangeKind:
    if first == second:
        return first
    if ChangeKind.RENAMED in (first, second):
        return ChangeKind.RENAMED
    return ChangeKind.MODIFIED
