"""Tests for CommitFilterCriteria validation and matching."""

from datetime import date, datetime, timezone

import pytest

from commit_stats.criteria import (
    CommitFilterCriteria,
    CommitOrder,
    DiffErrorPolicy,
    MergeDiffPolicy,
    MergeInclusion,
)
from commit_stats.exceptions import InvalidCriteriaError, InvalidRangeError
from commit_stats.models import Author, ChangeStats, CommitRecord, FileChange


class TestValidation:
    """Test that malformed criteria are rejected at construction."""

    def test_defaults(self):
        criteria = CommitFilterCriteria()
        assert criteria.merges is MergeInclusion.INCLUDE
        assert criteria.merge_diff is MergeDiffPolicy.SKIP
        assert criteria.on_diff_error is DiffErrorPolicy.SKIP
        assert criteria.order is CommitOrder.NEWEST_FIRST
        assert str(criteria) == ""

    def test_reversed_range_raises(self):
        with pytest.raises(InvalidRangeError):
            CommitFilterCriteria(since=date(2024, 2, 1), until=date(2024, 1, 1))

    def test_range_error_is_criteria_error(self):
        with pytest.raises(InvalidCriteriaError):
            CommitFilterCriteria(since=date(2024, 2, 1), until=date(2024, 1, 1))

    def test_single_day_range_allowed(self):
        CommitFilterCriteria(since=date(2024, 1, 1), until=date(2024, 1, 1))

    def test_author_and_exclude_author_conflict(self):
        with pytest.raises(InvalidCriteriaError):
            CommitFilterCriteria(authors=["alice"], exclude_authors=["bob"])

    def test_max_commits_must_be_positive(self):
        with pytest.raises(InvalidCriteriaError):
            CommitFilterCriteria(max_commits=0)

    def test_empty_ref_rejected(self):
        with pytest.raises(InvalidCriteriaError):
            CommitFilterCriteria(ref="  ")

    def test_unknown_policy_rejected(self):
        with pytest.raises(InvalidCriteriaError):
            CommitFilterCriteria(merges="sometimes")

    def test_string_values_coerced(self):
        criteria = CommitFilterCriteria(authors="alice", merges="only", order="oldest-first")
        assert criteria.authors == ("alice",)
        assert criteria.merges is MergeInclusion.ONLY
        assert not criteria.newest_first

    def test_paths_normalized(self):
        criteria = CommitFilterCriteria(paths=["./src/", "docs\\api", ""])
        assert criteria.paths == ("src", "docs/api")

    @pytest.mark.parametrize("field", ["since", "until"])
    def test_string_bound_rejected(self, field):
        with pytest.raises(InvalidCriteriaError) as exc_info:
            CommitFilterCriteria(**{field: "2024-01-01"})
        assert field in exc_info.value.details

    def test_datetime_bound_accepted(self):
        criteria = CommitFilterCriteria(since=datetime(2024, 1, 1, 12, tzinfo=timezone.utc))
        assert criteria.since.hour == 12


class TestDateBounds:
    """Test inclusive date bounds."""

    def test_date_covers_whole_day(self):
        criteria = CommitFilterCriteria(since=date(2024, 1, 1), until=date(2024, 1, 1))
        assert criteria.in_range(datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc))
        assert criteria.in_range(datetime(2024, 1, 1, 23, 59, 59, tzinfo=timezone.utc))
        assert not criteria.in_range(datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc))
        assert not criteria.in_range(datetime(2024, 1, 2, tzinfo=timezone.utc))

    def test_naive_datetime_bound_is_utc(self):
        criteria = CommitFilterCriteria(since=datetime(2024, 1, 1, 12))
        assert criteria.lower_bound == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
        assert not criteria.in_range(datetime(2024, 1, 1, 11, tzinfo=timezone.utc))

    def test_open_bounds(self):
        assert CommitFilterCriteria().in_range(datetime(1999, 1, 1, tzinfo=timezone.utc))


class TestMatching:
    """Test author, parent-count and path matching."""

    def test_author_by_email_case_insensitive(self):
        criteria = CommitFilterCriteria(authors=["ALICE@example.com"])
        assert criteria.matches_author(Author("Alice", "alice@example.com"))
        assert not criteria.matches_author(Author("Bob", "bob@example.com"))

    def test_author_by_name(self):
        criteria = CommitFilterCriteria(authors=["alice"])
        assert criteria.matches_author(Author("Alice", "a@x.org"))

    def test_author_by_full_identity(self):
        criteria = CommitFilterCriteria(authors=["Alice <alice@example.com>"])
        assert criteria.matches_author(Author("alice", "alice@example.com"))
        assert not criteria.matches_author(Author("Alice", "other@example.com"))

    def test_exclude_author(self):
        criteria = CommitFilterCriteria(exclude_authors=["bob"])
        assert criteria.matches_author(Author("Alice", "alice@example.com"))
        assert not criteria.matches_author(Author("Bob", "bob@example.com"))

    def test_parent_count(self):
        exclude = CommitFilterCriteria(merges="exclude")
        only = CommitFilterCriteria(merges="only")
        assert exclude.accepts_parent_count(1) and not exclude.accepts_parent_count(2)
        assert only.accepts_parent_count(2) and not only.accepts_parent_count(0)

    def test_path_prefix_is_directory_aware(self):
        criteria = CommitFilterCriteria(paths=["src"])
        assert criteria.matches_path(FileChange("src/app.py"))
        assert criteria.matches_path(FileChange("src"))
        assert not criteria.matches_path(FileChange("srcs/app.py"))

    def test_path_matches_rename_source(self):
        criteria = CommitFilterCriteria(paths=["old"])
        assert criteria.matches_path(FileChange("new/a.py", old_path="old/a.py"))


class TestNarrow:
    def _record(self):
        files = (FileChange("docs/a.md", 4, 0), FileChange("src/b.py", 1, 2))
        return CommitRecord("abc", Author("A"), 0, 1, stats=ChangeStats(5, 2, 2), files=files)

    def test_no_paths_returns_record_unchanged(self):
        rec = self._record()
        assert CommitFilterCriteria().narrow(rec) is rec

    def test_narrows_stats_to_matching_files(self):
        narrowed = CommitFilterCriteria(paths=["src"]).narrow(self._record())
        assert narrowed.stats == ChangeStats(1, 2, 1)
        assert [f.path for f in narrowed.files] == ["src/b.py"]

    def test_no_matching_file_drops_record(self):
        assert CommitFilterCriteria(paths=["lib"]).narrow(self._record()) is None


class TestStr:
    def test_describes_filters(self):
        criteria = CommitFilterCriteria(authors=["alice"], since=date(2024, 1, 1), merges="exclude")
        text = str(criteria)
        assert "authors:alice" in text
        assert "since:2024-01-01" in text
        assert "merges:exclude" in text
