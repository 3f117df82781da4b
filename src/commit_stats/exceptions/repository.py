"""Repository-related exceptions: access, diffs, traversal."""

from typing import Optional

from .base import CommitStatsError


class RepositoryAccessError(CommitStatsError):
    """Raised when a repository or a ref inside it cannot be read.

    Fatal: it points at a configuration problem, so nothing retries it.
    """

    def __init__(self, path: str, reason: str, ref: Optional[str] = None):
        details = {"path": path, "reason": reason, "ref": ref}
        if ref is not None:
            message = f"Cannot resolve ref '{ref}' in repository: {path}"
        else:
            message = f"Cannot access repository: {path}"
        super().__init__(message, details=details)
        self.path = path
        self.reason = reason
        self.ref = ref


class DiffComputationError(CommitStatsError):
    """Raised when the diff of a single commit cannot be computed."""

    def __init__(self, commit: str, reason: str, parent: Optional[str] = None):
        details = {"commit": commit, "reason": reason, "parent": parent}
        super().__init__(f"Failed to compute diff for commit {commit[:12]}", details=details)
        self.commit = commit
        self.reason = reason
        self.parent = parent


class TraversalCancelledError(CommitStatsError):
    """Raised when a caller cancels a traversal; partial results are discarded."""

    exit_code = 130

    def __init__(self, processed: int):
        super().__init__(
            "Commit traversal cancelled",
            details={"processed": processed},
        )
        self.processed = processed
