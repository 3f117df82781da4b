"""Tests for grouping keys and calendar buckets."""

from datetime import date, datetime, timezone

import pytest

from commit_stats.aggregation import Granularity, GroupBy, GroupKey, TimeBucket, natural_order
from commit_stats.exceptions import InvalidConfigError
from commit_stats.models import Author


class TestTimeBucket:
    """Test bucket alignment, labels and stepping."""

    @pytest.mark.parametrize(
        "granularity,start,label",
        [
            (Granularity.DAY, date(2024, 2, 29), "2024-02-29"),
            (Granularity.WEEK, date(2024, 2, 26), "2024-W09"),
            (Granularity.MONTH, date(2024, 2, 1), "2024-02"),
            (Granularity.YEAR, date(2024, 1, 1), "2024"),
        ],
    )
    def test_containing(self, granularity, start, label):
        bucket = TimeBucket.containing(datetime(2024, 2, 29, 18, tzinfo=timezone.utc), granularity)
        assert bucket.start == start
        assert bucket.label == label

    def test_iso_week_at_year_boundary(self):
        bucket = TimeBucket.containing(date(2021, 1, 1), Granularity.WEEK)
        assert bucket.start == date(2020, 12, 28)
        assert bucket.label == "2020-W53"

    def test_next_month_handles_lengths(self):
        jan = TimeBucket(date(2024, 1, 1), Granularity.MONTH)
        assert jan.next().start == date(2024, 2, 1)
        assert jan.next().next().start == date(2024, 3, 1)
        assert TimeBucket(date(2024, 12, 1), Granularity.MONTH).next().start == date(2025, 1, 1)

    def test_end(self):
        assert TimeBucket(date(2024, 2, 1), Granularity.MONTH).end == date(2024, 2, 29)
        assert TimeBucket(date(2024, 1, 1), Granularity.WEEK).end == date(2024, 1, 7)

    def test_ordering_is_chronological(self):
        buckets = [TimeBucket(date(2024, m, 1), Granularity.MONTH) for m in (3, 1, 2)]
        assert [b.start.month for b in sorted(buckets)] == [1, 2, 3]


class TestGroupKey:
    """Test construction, parsing and formatting of group keys."""

    def test_time_bucket_requires_granularity(self):
        with pytest.raises(ValueError):
            GroupKey(GroupBy.TIME_BUCKET)

    def test_other_kinds_reject_granularity(self):
        with pytest.raises(ValueError):
            GroupKey(GroupBy.AUTHOR, Granularity.DAY)

    def test_equal_keys_hash_equal(self):
        assert GroupKey.time_bucket("week") == GroupKey.time_bucket(Granularity.WEEK)
        assert len({GroupKey.author(), GroupKey.author()}) == 1

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("author", GroupKey.author()),
            ("FILE", GroupKey.file_path()),
            ("path", GroupKey.file_path()),
            ("week", GroupKey.time_bucket(Granularity.WEEK)),
            ("hour", GroupKey.hour_of_day()),
        ],
    )
    def test_parse(self, name, expected):
        assert GroupKey.parse(name) == expected

    def test_parse_unknown(self):
        with pytest.raises(InvalidConfigError):
            GroupKey.parse("planet")

    def test_format_value(self):
        assert GroupKey.weekday().format_value(0) == "Monday"
        assert GroupKey.hour_of_day().format_value(7) == "07:00"
        assert GroupKey.author().format_value(Author("A", "a@x")) == "A <a@x>"

    def test_str(self):
        assert str(GroupKey.time_bucket("month")) == "month"
        assert str(GroupKey.file_path()) == "file"
        assert GroupKey.file_path().is_per_file


class TestNaturalOrder:
    def test_authors_by_name_then_email(self):
        assert natural_order(Author("a", "z")) < natural_order(Author("b", "a"))

    def test_buckets_by_start(self):
        assert natural_order(TimeBucket(date(2024, 1, 1), Granularity.DAY)) == date(2024, 1, 1)
