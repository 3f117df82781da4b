"""Tests for weekday x hour activity heatmaps."""

import numpy as np

from conftest import record, ts

from commit_stats.aggregation import HeatmapGrid, activity_heatmap
from commit_stats.models import Author


class TestActivityHeatmap:
    """Test heatmap counting and per-author breakdown."""

    def _records(self):
        # 2024-01-01 is a Monday, 2024-01-06 a Saturday
        return [
            record("1", "A", added=3, when=ts(2024, 1, 1, 9)),
            record("2", "A", added=1, removed=2, when=ts(2024, 1, 8, 9)),
            record("3", "B", added=5, when=ts(2024, 1, 6, 23)),
        ]

    def test_total_counts(self):
        heatmap = activity_heatmap(self._records())
        grid = heatmap.total
        assert grid.total_commits == 3
        assert grid.commits[0, 9] == 2
        assert grid.commits[5, 23] == 1
        assert grid.lines_added[0, 9] == 4
        assert grid.lines_removed[0, 9] == 2

    def test_per_author(self):
        heatmap = activity_heatmap(self._records())
        assert heatmap.by_author[Author("A", "a@example.com")].total_commits == 2
        assert heatmap.by_author[Author("B", "b@example.com")].commits[5, 23] == 1

    def test_marginals(self):
        grid = activity_heatmap(self._records()).total
        assert grid.per_weekday().tolist() == [2, 0, 0, 0, 0, 1, 0]
        assert grid.per_hour()[9] == 2
        assert int(grid.per_hour().sum()) == 3

    def test_busiest_slot(self):
        assert activity_heatmap(self._records()).total.busiest_slot() == (0, 9)

    def test_empty(self):
        heatmap = activity_heatmap([])
        assert heatmap.total.total_commits == 0
        assert heatmap.total.busiest_slot() is None
        assert heatmap.by_author == {}

    def test_identity_merges_grids(self):
        heatmap = activity_heatmap(self._records(), identity=lambda a: Author("team"))
        assert list(heatmap.by_author) == [Author("team")]
        assert heatmap.by_author[Author("team")].total_commits == 3

    def test_grid_addition(self):
        a, b = HeatmapGrid(), HeatmapGrid()
        a.commits[1, 2] = 3
        b.commits[1, 2] = 4
        assert (a + b).commits[1, 2] == 7
        assert a.commits.dtype == np.int64

    def test_to_dict_is_json_ready(self):
        data = activity_heatmap(self._records()).total.to_dict()
        assert len(data["commits"]) == 7
        assert len(data["commits"][0]) == 24
        assert data["commits"][0][9] == 2

    def test_weekday_name(self):
        assert activity_heatmap([]).weekday_name(6) == "Sunday"
