"""Commit history: diff summaries and the filtered commit stream."""

from .stream import CommitStream, as_cancel_check, list_commits
from .summarizer import DiffSummary, summarize_commit, summarize_diff, summarize_files

__all__ = [
    "CommitStream",
    "DiffSummary",
    "as_cancel_check",
    "list_commits",
    "summarize_commit",
    "summarize_diff",
    "summarize_files",
]
