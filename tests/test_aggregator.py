"""Tests for directory roll-up."""

from diskprobe.aggregator import roll_up
from diskprobe.walker import DirectoryAggregate


def aggregates(*items: DirectoryAggregate) -> dict[str, DirectoryAggregate]:
    return {agg.path: agg for agg in items}


class TestRollUp:
    def test_cumulative_totals(self):
        dirs = aggregates(
            DirectoryAggregate("/r", "", 0, size_bytes=1, file_count=1),
            DirectoryAggregate("/r/a", "/r", 1, size_bytes=10, file_count=1),
            DirectoryAggregate("/r/a/b", "/r/a", 2, size_bytes=20, file_count=2),
            DirectoryAggregate("/r/c", "/r", 1, size_bytes=5, file_count=1),
        )

        roll_up(dirs)

        assert dirs["/r/a/b"].size_bytes == 20
        assert dirs["/r/a"].size_bytes == 30
        assert dirs["/r/a"].file_count == 3
        assert dirs["/r/c"].size_bytes == 5
        assert dirs["/r"].size_bytes == 36
        assert dirs["/r"].file_count == 5

    def test_insertion_order_does_not_matter(self):
        dirs = aggregates(
            DirectoryAggregate("/r/a/b/c", "/r/a/b", 3, size_bytes=4, file_count=1),
            DirectoryAggregate("/r", "", 0),
            DirectoryAggregate("/r/a/b", "/r/a", 2, size_bytes=2, file_count=1),
            DirectoryAggregate("/r/a", "/r", 1, size_bytes=1, file_count=1),
        )

        roll_up(dirs)

        assert dirs["/r"].size_bytes == 7
        assert dirs["/r"].file_count == 3

    def test_missing_parent_is_dropped(self):
        dirs = aggregates(
            DirectoryAggregate("/r", "", 0, size_bytes=1, file_count=1),
            DirectoryAggregate("/elsewhere/x", "/elsewhere", 1, size_bytes=50, file_count=5),
        )

        roll_up(dirs)

        assert dirs["/r"].size_bytes == 1
        assert dirs["/elsewhere/x"].size_bytes == 50

    def test_empty(self):
        assert roll_up({}) == {}
