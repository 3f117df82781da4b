"""Root of the commit-stats exception hierarchy."""

from typing import Any, Dict, Optional


class CommitStatsError(Exception):
    """Base exception for all commit-stats errors.

    ``details`` holds the context of the failure (paths, refs, commit ids)
    as strings, without the entries that were ``None``. ``exit_code`` is the
    status the command line exits with.
    """

    exit_code = 1

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = {key: str(value) for key, value in (details or {}).items() if value is not None}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
