"""Shared test fixtures: an in-memory repository backend and record builders."""

from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Sequence

import pytest

from commit_stats.exceptions import DiffComputationError, RepositoryAccessError
from commit_stats.git.backend import RawCommit, RepositoryBackend
from commit_stats.models import Author, ChangeKind, ChangeStats, CommitRecord, DiffEntry, FileChange


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def ts(year: int, month: int = 1, day: int = 1, hour: int = 12, minute: int = 0) -> int:
    """Unix seconds for a UTC wall-clock time."""
    return int(datetime(year, month, day, hour, minute, tzinfo=timezone.utc).timestamp())


def raw(
    commit_hash: str,
    parents: Sequence[str] = (),
    name: str = "Alice",
    email: str = "alice@example.com",
    timestamp: Optional[int] = None,
    subject: str = "",
) -> RawCommit:
    return RawCommit(
        hash=commit_hash,
        parents=tuple(parents),
        author_name=name,
        author_email=email,
        timestamp=timestamp if timestamp is not None else ts(2024),
        subject=subject or f"commit {commit_hash}",
    )


def record(
    commit_hash: str,
    author: str = "A",
    added: int = 0,
    removed: int = 0,
    files: Iterable[tuple] = (),
    when: Optional[int] = None,
    parent_count: int = 1,
) -> CommitRecord:
    """Build a CommitRecord; ``files`` holds ``(path, added, removed)`` tuples."""
    changes = tuple(FileChange(path, a, r) for path, a, r in files)
    if changes:
        stats = ChangeStats.sum(c.stats for c in changes)
    else:
        stats = ChangeStats(added, removed, 1 if (added or removed) else 0)
    return CommitRecord(
        hash=commit_hash,
        author=Author(author, f"{author.lower()}@example.com"),
        timestamp=when if when is not None else ts(2024),
        parent_count=parent_count,
        stats=stats,
        files=changes,
    )


class FakeRepository(RepositoryBackend):
    """In-memory backend.

    ``commits`` are listed newest first (children before parents). ``diffs``
    maps a commit hash, or a ``(commit, parent)`` pair, to its diff entries.
    Hashes in ``broken`` fail to diff.
    """

    def __init__(
        self,
        commits: Sequence[RawCommit],
        diffs: Optional[Dict] = None,
        refs: Optional[Dict[str, str]] = None,
        broken: Iterable[str] = (),
    ):
        self.commits = list(commits)
        self.diffs = diffs or {}
        self.refs = refs or {}
        self.broken = set(broken)
        self.diff_calls = []
        self.walks = 0

    def resolve_ref(self, ref: str) -> str:
        if ref in self.refs:
            return self.refs[ref]
        if any(c.hash == ref for c in self.commits):
            return ref
        raise RepositoryAccessError("<fake>", "unknown revision", ref=ref)

    def iter_commits(self, ref=None, newest_first=True):
        self.walks += 1
        if ref is None:
            selected = list(self.commits)
        else:
            by_hash = {c.hash: c for c in self.commits}
            reachable = set()
            pending = [ref]
            while pending:
                current = pending.pop()
                if current in reachable or current not in by_hash:
                    continue
                reachable.add(current)
                pending.extend(by_hash[current].parents)
            selected = [c for c in self.commits if c.hash in reachable]
        if not newest_first:
            selected.reverse()
        return iter(selected)

    def diff(self, commit, parent=None):
        self.diff_calls.append((commit, parent))
        if commit in self.broken:
            raise DiffComputationError(commit, "object missing", parent=parent)
        if (commit, parent) in self.diffs:
            return list(self.diffs[(commit, parent)])
        return list(self.diffs.get(commit, ()))


@pytest.fixture
def linear_repo():
    """Three commits on one branch: root by Alice, then Bob, then Alice."""
    commits = [
        raw("c3", ["c2"], timestamp=ts(2024, 3, 5, 9), subject="tweak readme"),
        raw("c2", ["c1"], name="Bob", email="bob@example.com", timestamp=ts(2024, 2, 10, 14), subject="add lib"),
        raw("c1", [], timestamp=ts(2024, 1, 1, 8), subject="initial"),
    ]
    diffs = {
        "c1": [
            DiffEntry("README.md", 10, 0, kind=ChangeKind.ADDED),
            DiffEntry("src/app.py", 20, 0, kind=ChangeKind.ADDED),
            DiffEntry("src/util.py", 30, 0, kind=ChangeKind.ADDED),
        ],
        "c2": [DiffEntry("src/lib.py", 5, 0, kind=ChangeKind.ADDED)],
        "c3": [DiffEntry("README.md", 1, 1)],
    }
    return FakeRepository(commits, diffs, refs={"main": "c3"})


@pytest.fixture
def merge_repo():
    """A feature branch merged back into main.

        c1 -- c2 ------ m1
          \\            /
           f1 -------
    """
    commits = [
        raw("m1", ["c2", "f1"], timestamp=ts(2024, 1, 4), subject="Merge branch 'feature'"),
        raw("c2", ["c1"], timestamp=ts(2024, 1, 3), subject="main work"),
        raw("f1", ["c1"], name="Bob", email="bob@example.com", timestamp=ts(2024, 1, 2), subject="feature work"),
        raw("c1", [], timestamp=ts(2024, 1, 1), subject="initial"),
    ]
    diffs = {
        "c1": [DiffEntry("a.txt", 3, 0, kind=ChangeKind.ADDED)],
        "c2": [DiffEntry("a.txt", 2, 1)],
        "f1": [DiffEntry("b.txt", 7, 0, kind=ChangeKind.ADDED)],
        ("m1", "c2"): [DiffEntry("b.txt", 7, 0, kind=ChangeKind.ADDED)],
    }
    return FakeRepository(commits, diffs, refs={"main": "m1"})
