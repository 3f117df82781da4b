"""Repository access and diff capabilities the core consumes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from ..models import DiffEntry


@dataclass(frozen=True)
class RawCommit:
    """Commit metadata as enumerated by a backend, before any diff work."""

    hash: str
    parents: tuple[str, ...]
    author_name: str
    author_email: str
    timestamp: int  # unix seconds, author date
    subject: str = ""

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def is_root(self) -> bool:
        return not self.parents


class RepositoryBackend(ABC):
    """Read-only view of a repository."""

    @abstractmethod
    def resolve_ref(self, ref: str) -> str:
        """Return the commit id ``ref`` points at.

        Raises:
            RepositoryAccessError: if the ref does not exist.
        """

    @abstractmethod
    def iter_commits(self, ref: Optional[str] = None, newest_first: bool = True) -> Iterator[RawCommit]:
        """Yield commits reachable from ``ref`` (all refs when ``None``).

        Newest-first order is by author timestamp; a commit is never yielded
        before any of its children. Oldest-first is the exact reverse.
        """

    @abstractmethod
    def diff(self, commit: str, parent: Optional[str] = None) -> Sequence[DiffEntry]:
        """Per-file hunks between ``parent`` (empty tree when ``None``) and ``commit``.

        Raises:
            DiffComputationError: if the diff cannot be produced.
        """
