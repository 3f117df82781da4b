"""Grouping dimensions and calendar buckets."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidConfigError
from ..models import Author


class GroupBy(str, Enum):
    AUTHOR = "author"
    FILE_PATH = "file"
    TIME_BUCKET = "time"
    WEEKDAY = "weekday"  # 0 = Monday
    HOUR_OF_DAY = "hour"  # 0-23, UTC


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True, order=True)
class TimeBucket:
    """Calendar-aligned interval starting at ``start`` (UTC).

    Weeks start on Monday and are labelled with their ISO week number.
    """

    start: date
    granularity: Granularity

    @classmethod
    def containing(cls, moment: date | datetime, granularity: Granularity) -> TimeBucket:
        day = moment.date() if isinstance(moment, datetime) else moment
        if granularity is Granularity.DAY:
            start = day
        elif granularity is Granularity.WEEK:
            start = day - timedelta(days=day.weekday())
        elif granularity is Granularity.MONTH:
            start = day.replace(day=1)
        else:
            start = day.replace(month=1, day=1)
        return cls(start=start, granularity=granularity)

    @property
    def end(self) -> date:
        """Last day inside the bucket."""
        return self.next().start - timedelta(days=1)

    def next(self) -> TimeBucket:
        start = self.start
        if self.granularity is Granularity.DAY:
            following = start + timedelta(days=1)
        elif self.granularity is Granularity.WEEK:
            following = start + timedelta(days=7)
        elif self.granularity is Granularity.MONTH:
            following = start + timedelta(days=calendar.monthrange(start.year, start.month)[1])
        else:
            following = start.replace(year=start.year + 1)
        return TimeBucket(start=following, granularity=self.granularity)

    @property
    def label(self) -> str:
        if self.granularity is Granularity.DAY:
            return self.start.isoformat()
        if self.granularity is Granularity.WEEK:
            iso_year, iso_week, _ = self.start.isocalendar()
            return f"{iso_year}-W{iso_week:02d}"
        if self.granularity is Granularity.MONTH:
            return self.start.strftime("%Y-%m")
        return f"{self.start.year:04d}"

    def __str__(self) -> str:
        return self.label


_NAMES = {
    "author": GroupBy.AUTHOR,
    "file": GroupBy.FILE_PATH,
    "path": GroupBy.FILE_PATH,
    "weekday": GroupBy.WEEKDAY,
    "hour": GroupBy.HOUR_OF_DAY,
}


@dataclass(frozen=True)
class GroupKey:
    """The dimension to aggregate by.

    Only ``TIME_BUCKET`` carries data (its granularity). Build instances with
    the named constructors:

        GroupKey.author()
        GroupKey.file_path()
        GroupKey.time_bucket(Granularity.WEEK)
    """

    kind: GroupBy
    granularity: Optional[Granularity] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", GroupBy(self.kind))
        if self.kind is GroupBy.TIME_BUCKET:
            if self.granularity is None:
                raise ValueError("time bucket grouping needs a granularity")
            object.__setattr__(self, "granularity", Granularity(self.granularity))
        elif self.granularity is not None:
            raise ValueError(f"{self.kind.value} grouping takes no granularity")

    @classmethod
    def author(cls) -> GroupKey:
        return cls(GroupBy.AUTHOR)

    @classmethod
    def file_path(cls) -> GroupKey:
        return cls(GroupBy.FILE_PATH)

    @classmethod
    def time_bucket(cls, granularity: Granularity | str = Granularity.MONTH) -> GroupKey:
        return cls(GroupBy.TIME_BUCKET, Granularity(granularity))

    @classmethod
    def weekday(cls) -> GroupKey:
        return cls(GroupBy.WEEKDAY)

    @classmethod
    def hour_of_day(cls) -> GroupKey:
        return cls(GroupBy.HOUR_OF_DAY)

    @classmethod
    def parse(cls, name: str) -> GroupKey:
        """Parse ``author``, ``file``, ``weekday``, ``hour`` or a granularity name."""
        lowered = name.strip().lower()
        if lowered in _NAMES:
            return cls(_NAMES[lowered])
        try:
            return cls.time_bucket(Granularity(lowered))
        except ValueError:
            raise InvalidConfigError("group_by", name, "unknown grouping")

    @property
    def is_per_file(self) -> bool:
        return self.kind is GroupBy.FILE_PATH

    def format_value(self, value: Any) -> str:
        if self.kind is GroupBy.WEEKDAY:
            return calendar.day_name[value]
        if self.kind is GroupBy.HOUR_OF_DAY:
            return f"{value:02d}:00"
        return str(value)

    def __str__(self) -> str:
        if self.kind is GroupBy.TIME_BUCKET:
            return self.granularity.value
        return self.kind.value


def natural_order(value: Any) -> Any:
    """Sort key for a group value: lexicographic for authors and paths,
    chronological for time buckets, numeric for weekdays and hours."""
    if isinstance(value, Author):
        return (value.name, value.email)
    if isinstance(value, TimeBucket):
        return value.start
    return value
