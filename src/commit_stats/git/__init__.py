"""Repository access: the backend interface and the git implementation."""

from .backend import RawCommit, RepositoryBackend
from .repository import GitRepository, open_repository, parse_diff_tree, parse_log_record

__all__ = [
    "RawCommit",
    "RepositoryBackend",
    "GitRepository",
    "open_repository",
    "parse_diff_tree",
    "parse_log_record",
]
