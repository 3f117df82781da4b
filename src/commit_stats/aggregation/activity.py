"""Weekday x hour activity heatmaps."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from ..history.stream import CancelCheck, as_cancel_check
from ..exceptions import TraversalCancelledError
from ..models import Author, CommitRecord
from .identity import Identity, IdentityPolicy, build_resolver

WEEKDAYS = 7
HOURS = 24


def _zeros() -> np.ndarray:
    return np.zeros((WEEKDAYS, HOURS), dtype=np.int64)


@dataclass
class HeatmapGrid:
    """Counters indexed ``[weekday, hour]`` (Monday = 0, UTC hours)."""

    commits: np.ndarray = field(default_factory=_zeros)
    lines_added: np.ndarray = field(default_factory=_zeros)
    lines_removed: np.ndarray = field(default_factory=_zeros)

    def add(self, record: CommitRecord) -> None:
        slot = (record.timestamp.weekday(), record.timestamp.hour)
        self.commits[slot] += 1
        self.lines_added[slot] += record.stats.lines_added
        self.lines_removed[slot] += record.stats.lines_removed

    def __add__(self, other: HeatmapGrid) -> HeatmapGrid:
        return HeatmapGrid(
            commits=self.commits + other.commits,
            lines_added=self.lines_added + other.lines_added,
            lines_removed=self.lines_removed + other.lines_removed,
        )

    @property
    def total_commits(self) -> int:
        return int(self.commits.sum())

    def per_weekday(self) -> np.ndarray:
        return self.commits.sum(axis=1)

    def per_hour(self) -> np.ndarray:
        return self.commits.sum(axis=0)

    def busiest_slot(self) -> tuple[int, int] | None:
        """``(weekday, hour)`` with the most commits, earliest slot on ties."""
        if not self.commits.any():
            return None
        weekday, hour = np.unravel_index(int(np.argmax(self.commits)), self.commits.shape)
        return int(weekday), int(hour)

    def to_dict(self) -> dict:
        return {
            "commits": self.commits.tolist(),
            "lines_added": self.lines_added.tolist(),
            "lines_removed": self.lines_removed.tolist(),
        }


@dataclass
class ActivityHeatmap:
    total: HeatmapGrid
    by_author: dict[Author, HeatmapGrid]

    @staticmethod
    def weekday_name(index: int) -> str:
        return calendar.day_name[index]


def activity_heatmap(
    records: Iterable[CommitRecord],
    identity: Identity = IdentityPolicy.EXACT,
    should_cancel: CancelCheck = None,
) -> ActivityHeatmap:
    """Count commits and lines per weekday and hour, overall and per author."""
    cancelled = as_cancel_check(should_cancel)
    per_author: dict[Author, HeatmapGrid] = {}
    seen = 0
    for record in records:
        if cancelled():
            raise TraversalCancelledError(seen)
        grid = per_author.get(record.author)
        if grid is None:
            grid = per_author[record.author] = HeatmapGrid()
        grid.add(record)
        seen += 1

    resolve = build_resolver(identity, per_author)
    by_author: dict[Author, HeatmapGrid] = {}
    for author, grid in per_author.items():
        canonical = resolve(author)
        by_author[canonical] = by_author[canonical] + grid if canonical in by_author else grid

    total = HeatmapGrid()
    for grid in by_author.values():
        total = total + grid
    return ActivityHeatmap(total=total, by_author=by_author)
