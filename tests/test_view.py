"""Tests for sorted and filtered views over aggregated stats."""

from datetime import date

import pytest

from conftest import record, ts

from commit_stats.aggregation import AggregatedStat, Granularity, GroupKey, TimeBucket, aggregate
from commit_stats.models import Author, ChangeStats
from commit_stats.view import SortKey, SortOrder, author_totals, metric, threshold, timeline, top_n, totals, view


def stat(key, added=0, removed=0, files=0, commits=1):
    return AggregatedStat(key=key, stats=ChangeStats(added, removed, files), commits_count=commits)


@pytest.fixture
def entries():
    return {
        "b": stat("b", added=10, removed=1, files=2, commits=3),
        "a": stat("a", added=10, removed=5, files=1, commits=1),
        "c": stat("c", added=2, removed=0, files=4, commits=3),
    }


class TestMetric:
    @pytest.mark.parametrize(
        "key,expected",
        [
            (SortKey.COMMITS, 3),
            (SortKey.LINES_ADDED, 10),
            (SortKey.LINES_REMOVED, 1),
            (SortKey.LINES_NET, 9),
            ("files-changed", 2),
        ],
    )
    def test_metric(self, entries, key, expected):
        assert metric(entries["b"], key) == expected


class TestView:
    """Test sorting and tie-breaking."""

    def test_default_is_descending(self, entries):
        assert [s.key for s in view(entries, SortKey.LINES_REMOVED)] == ["a", "b", "c"]

    def test_ascending(self, entries):
        assert [s.key for s in view(entries, "lines-removed", SortOrder.ASCENDING)] == ["c", "b", "a"]

    def test_ties_broken_by_natural_order(self, entries):
        assert [s.key for s in view(entries, SortKey.LINES_ADDED)] == ["a", "b", "c"]
        assert [s.key for s in view(entries, SortKey.COMMITS)] == ["b", "c", "a"]

    def test_secondary_metric(self, entries):
        rows = view(entries, SortKey.COMMITS, secondary=SortKey.FILES_CHANGED)
        assert [s.key for s in rows] == ["c", "b", "a"]

    def test_idempotent(self, entries):
        once = view(entries, SortKey.LINES_NET)
        assert view(once, SortKey.LINES_NET) == once

    def test_does_not_mutate_input(self, entries):
        before = dict(entries)
        view(entries, SortKey.COMMITS)
        assert entries == before

    def test_empty(self):
        assert view({}, SortKey.COMMITS) == []

    def test_unknown_key(self, entries):
        with pytest.raises(ValueError):
            view(entries, "popularity")

    def test_authors_tie_broken_by_name(self):
        records = [record("1", "Zed"), record("2", "Amy")]
        rows = view(aggregate(records, GroupKey.author()), SortKey.COMMITS)
        assert [r.key.name for r in rows] == ["Amy", "Zed"]


class TestTopAndThreshold:
    def test_top_n(self, entries):
        assert [s.key for s in top_n(entries, 2, SortKey.COMMITS)] == ["b", "c"]
        assert top_n(entries, 0) == []
        assert len(top_n(entries, 10)) == 3

    def test_top_n_negative(self, entries):
        with pytest.raises(ValueError):
            top_n(entries, -1)

    def test_threshold_is_strict(self, entries):
        kept = threshold(entries, SortKey.COMMITS, 1)
        assert set(kept) == {"b", "c"}

    def test_threshold_keeps_sequence_order(self, entries):
        rows = view(entries, SortKey.LINES_ADDED)
        kept = threshold(rows, SortKey.LINES_ADDED, 5)
        assert [s.key for s in kept] == ["a", "b"]


class TestTotals:
    def test_totals(self, entries):
        total = totals(entries)
        assert total.key is None
        assert total.commits_count == 7
        assert total.stats == ChangeStats(22, 6, 7)


class TestTimeline:
    """Test chronological projections with gap filling."""

    def _monthly(self):
        records = [
            record("1", added=1, when=ts(2024, 1, 10)),
            record("2", added=2, when=ts(2024, 4, 2)),
        ]
        return aggregate(records, GroupKey.time_bucket(Granularity.MONTH))

    def test_fills_gaps(self):
        rows = timeline(self._monthly())
        assert [r.key.label for r in rows] == ["2024-01", "2024-02", "2024-03", "2024-04"]
        assert rows[1].commits_count == 0
        assert rows[1].stats == ChangeStats()

    def test_without_gap_filling(self):
        rows = timeline(self._monthly(), fill_gaps=False)
        assert [r.key.label for r in rows] == ["2024-01", "2024-04"]

    def test_empty(self):
        assert timeline({}) == []

    def test_rejects_non_time_keys(self, entries):
        with pytest.raises(ValueError):
            timeline(entries)

    def test_rejects_mixed_granularity(self):
        mixed = [
            stat(TimeBucket(date(2024, 1, 1), Granularity.MONTH)),
            stat(TimeBucket(date(2024, 1, 1), Granularity.DAY)),
        ]
        with pytest.raises(ValueError):
            timeline(mixed)


class TestAuthorTotals:
    def test_sorted_totals(self):
        records = [
            record("1", "A", added=10, removed=2),
            record("2", "B", added=5),
            record("3", "A", added=1, removed=1),
        ]
        rows = author_totals(records, SortKey.LINES_ADDED)
        assert [r.key for r in rows] == [Author("A", "a@example.com"), Author("B", "b@example.com")]
        assert rows[0].commits_count == 2
