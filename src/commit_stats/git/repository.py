"""Git repository backend driven through the ``git`` executable."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterator, Optional

from ..exceptions import DiffComputationError, RepositoryAccessError
from ..logging_config import get_logger
from ..models import ChangeKind, DiffEntry
from .backend import RawCommit, RepositoryBackend

logger = get_logger(__name__)

# Fields are separated by US (0x1f) and records start with RS (0x1e) so that
# subjects containing any printable character parse unambiguously.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%x1e%H%x1f%P%x1f%aN%x1f%aE%x1f%at%x1f%s"

_KIND_BY_STATUS = {
    "A": ChangeKind.ADDED,
    "M": ChangeKind.MODIFIED,
    "T": ChangeKind.MODIFIED,
    "D": ChangeKind.DELETED,
    "R": ChangeKind.RENAMED,
    "C": ChangeKind.COPIED,
}


class GitRepository(RepositoryBackend):
    """Read commits and diffs from a local git repository."""

    def __init__(self, repo_path: str | Path, git_executable: str = "git", timeout_seconds: int = 60):
        self.repo_path = str(Path(repo_path).resolve())
        self.git_executable = git_executable
        self.timeout_seconds = timeout_seconds

    def check(self) -> None:
        """Raise ``RepositoryAccessError`` unless the path is a readable git repository."""
        if not Path(self.repo_path).is_dir():
            raise RepositoryAccessError(self.repo_path, "directory does not exist")
        result = self._query(["rev-parse", "--git-dir"])
        if result.returncode != 0:
            raise RepositoryAccessError(self.repo_path, result.stderr.strip() or "not a git repository")

    def resolve_ref(self, ref: str) -> str:
        result = self._query(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], ref=ref)
        if result.returncode != 0 or not result.stdout.strip():
            raise RepositoryAccessError(self.repo_path, "unknown revision", ref=ref)
        return result.stdout.strip()

    def iter_commits(self, ref: Optional[str] = None, newest_first: bool = True) -> Iterator[RawCommit]:
        cmd = [
            self.git_executable,
            "-C",
            self.repo_path,
            "log",
            ref if ref is not None else "--all",
            "--author-date-order",
            f"--format={_LOG_FORMAT}",
        ]
        if not newest_first:
            cmd.append("--reverse")
        cmd.append("--")

        logger.debug("Running %s", " ".join(cmd))
        # Popen keeps memory flat on long histories; records are yielded as read.
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise RepositoryAccessError(self.repo_path, f"git executable not found: {e}")

        try:
            stdout = proc.stdout
            assert stdout is not None
            for line in stdout:
                line = line.rstrip("\n")
                if line.startswith(_RECORD_SEP):
                    yield self._parse_record(line[1:])
                elif line:
                    logger.debug("Ignoring unexpected git log line: %r", line)

            try:
                proc.wait(timeout=self.timeout_seconds)
            except subprocess.TimeoutExpired:
                raise RepositoryAccessError(
                    self.repo_path, f"git log timed out after {self.timeout_seconds}s", ref=ref
                )
            if proc.returncode != 0:
                stderr = proc.stderr.read() if proc.stderr else ""
                raise RepositoryAccessError(self.repo_path, stderr.strip() or "git log failed", ref=ref)
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            if proc.stdout:
                proc.stdout.close()
            if proc.stderr:
                proc.stderr.close()

    def diff(self, commit: str, parent: Optional[str] = None) -> list[DiffEntry]:
        args = ["diff-tree", "-r", "-M", "--raw", "--numstat", "-z", "--no-commit-id"]
        if parent is None:
            args += ["--root", commit]
        else:
            args += [parent, commit]
        try:
            result = self._run(args)
        except subprocess.TimeoutExpired:
            raise DiffComputationError(commit, "git diff-tree timed out", parent=parent)
        if result.returncode != 0:
            raise DiffComputationError(commit, result.stderr.strip() or "git diff-tree failed", parent=parent)
        try:
            return parse_diff_tree(result.stdout)
        except ValueError as e:
            raise DiffComputationError(commit, f"unparsable diff output: {e}", parent=parent)

    def _parse_record(self, record: str) -> RawCommit:
        try:
            return parse_log_record(record)
        except ValueError as e:
            raise RepositoryAccessError(self.repo_path, str(e))

    def _query(self, args: list[str], ref: Optional[str] = None) -> subprocess.CompletedProcess:
        """Run a repository or ref lookup; a timeout is reported as an access error."""
        try:
            return self._run(args)
        except subprocess.TimeoutExpired:
            raise RepositoryAccessError(
                self.repo_path, f"git {args[0]} timed out after {self.timeout_seconds}s", ref=ref
            )

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                [self.git_executable, "-C", self.repo_path, *args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as e:
            raise RepositoryAccessError(self.repo_path, f"git executable not found: {e}")

    def __repr__(self) -> str:
        return f"GitRepository({self.repo_path!r})"


def open_repository(path: str | Path, git_executable: str = "git", timeout_seconds: int = 60) -> GitRepository:
    """Open and validate a git repository.

    Raises:
        RepositoryAccessError: if ``path`` is missing or not a git repository.
    """
    repo = GitRepository(path, git_executable=git_executable, timeout_seconds=timeout_seconds)
    repo.check()
    logger.debug("Opened repository %s", repo.repo_path)
    return repo


def parse_log_record(record: str) -> RawCommit:
    """Parse one ``hash US parents US name US email US timestamp US subject`` record."""
    parts = record.split(_FIELD_SEP, 5)
    if len(parts) < 5:
        raise ValueError(f"malformed git log record: {record!r}")
    commit_hash, parents, name, email, timestamp = parts[:5]
    subject = parts[5] if len(parts) > 5 else ""
    try:
        ts = int(timestamp)
    except ValueError:
        raise ValueError(f"malformed author timestamp in record: {record!r}")
    return RawCommit(
        hash=commit_hash,
        parents=tuple(parents.split()),
        author_name=name,
        author_email=email,
        timestamp=ts,
        subject=subject,
    )


def parse_diff_tree(output: str) -> list[DiffEntry]:
    """Parse ``git diff-tree -r -M --raw --numstat -z`` output.

    The raw section supplies the change kind of each path, the numstat section
    the line counts (``-`` for binary files). Both are NUL separated; rename
    and copy entries carry two paths.
    """
    tokens = output.split("\0")
    kinds: dict[str, tuple[ChangeKind, Optional[str]]] = {}
    counts: list[tuple[str, Optional[str], Optional[int], Optional[int]]] = []

    i = 0
    while i < len(tokens):
        token = tokens[i].lstrip("\n")
        i += 1
        if not token:
            continue
        if token.startswith(":"):
            fields = token[1:].split()
            if len(fields) < 5:
                raise ValueError(f"bad raw entry {token!r}")
            status = fields[4]
            kind = _KIND_BY_STATUS.get(status[0], ChangeKind.MODIFIED)
            if status[0] in ("R", "C"):
                old_path, new_path = tokens[i], tokens[i + 1]
                i += 2
                kinds[new_path] = (kind, old_path)
            else:
                kinds[tokens[i]] = (kind, None)
                i += 1
            continue

        fields = token.split("\t")
        if len(fields) != 3:
            raise ValueError(f"bad numstat entry {token!r}")
        added, removed, path = fields
        old_path = None
        if not path:
            old_path, path = tokens[i], tokens[i + 1]
            i += 2
        counts.append(
            (
                path,
                old_path,
                None if added == "-" else int(added),
                None if removed == "-" else int(removed),
            )
        )

    entries = []
    for path, old_path, added, removed in counts:
        kind, raw_old = kinds.get(path, (ChangeKind.RENAMED if old_path else ChangeKind.MODIFIED, None))
        binary = added is None or removed is None
        entries.append(
            DiffEntry(
                path=path,
                lines_added=added or 0,
                lines_removed=removed or 0,
                kind=kind,
                old_path=old_path or raw_old,
                binary=binary,
            )
        )
    return entries
