"""Tests for the bounded tree walker."""

import os
import time

import pytest

from diskprobe.collectors import ErrorLog
from diskprobe.models import ScanConfig
from diskprobe.walker import REASON_MAX_ENTRIES, REASON_TIMEOUT, Deadline, TreeWalker


class StepClock:
    """Clock advancing by one on every reading."""

    def __init__(self):
        self.now = 0

    def __call__(self) -> float:
        self.now += 1
        return self.now


def run_walk(root, deadline=None, **overrides):
    config = ScanConfig(root=str(root), **overrides)
    walker = TreeWalker(config, deadline or Deadline.after(60), ErrorLog())
    visits = list(walker.walk())
    return walker, visits


class TestDeadline:
    def test_future_deadline(self):
        assert not Deadline.after(60).expired()

    def test_past_deadline(self):
        deadline = Deadline(time.monotonic() - 1)
        assert deadline.expired()
        assert deadline.remaining() == 0.0

    def test_custom_clock(self):
        deadline = Deadline(2, clock=StepClock())
        assert not deadline.expired()
        assert not deadline.expired()
        assert deadline.expired()


class TestTreeWalker:
    def test_visits_files_and_directories(self, tmp_path, make_file):
        make_file(tmp_path / "a" / "one.txt", 10)
        make_file(tmp_path / "a" / "b" / "two.txt", 20)
        make_file(tmp_path / "top.txt", 1)

        walker, visits = run_walk(tmp_path)

        files = {v.path for v in visits if not v.is_dir}
        dirs = {v.path for v in visits if v.is_dir}
        assert files == {
            str(tmp_path / "a" / "one.txt"),
            str(tmp_path / "a" / "b" / "two.txt"),
            str(tmp_path / "top.txt"),
        }
        assert dirs == {str(tmp_path / "a"), str(tmp_path / "a" / "b")}
        assert walker.dirs_scanned == 3
        assert walker.max_depth_reached == 2
        assert not walker.partial
        assert walker.reason == ""

    def test_files_credit_their_parent(self, tmp_path, make_file):
        make_file(tmp_path / "a" / "one.txt", 10)
        make_file(tmp_path / "a" / "two.txt", 5)

        walker, _ = run_walk(tmp_path)

        agg = walker.aggregates[str(tmp_path / "a")]
        assert agg.size_bytes == 15
        assert agg.file_count == 2
        assert agg.parent == str(tmp_path)
        assert agg.depth == 1
        assert walker.aggregates[str(tmp_path)].size_bytes == 0

    def test_depth_limit_registers_but_does_not_expand(self, tmp_path, make_file):
        make_file(tmp_path / "a" / "b" / "deep.txt", 10)

        walker, visits = run_walk(tmp_path, max_depth=1)

        assert str(tmp_path / "a" / "b") in walker.aggregates
        assert all(v.path != str(tmp_path / "a" / "b" / "deep.txt") for v in visits)
        assert walker.max_depth_reached == 1
        assert not walker.partial

    def test_max_entries_stops_walk(self, tmp_path, make_file):
        for i in range(1005):
            make_file(tmp_path / f"f{i:04d}.dat", 1)

        walker, visits = run_walk(tmp_path, max_entries=1000)

        assert walker.partial
        assert walker.reason == REASON_MAX_ENTRIES
        assert "max entries" in walker.reason
        assert len(visits) == 1000

    def test_expired_deadline_before_start(self, tmp_path, make_file):
        make_file(tmp_path / "a.txt", 1)

        walker, visits = run_walk(tmp_path, deadline=Deadline(time.monotonic() - 1))

        assert visits == []
        assert walker.partial
        assert walker.reason == REASON_TIMEOUT
        assert walker.dirs_scanned == 0
        assert walker.entries_seen == 0

    def test_deadline_checked_per_entry(self, tmp_path, make_file):
        for i in range(10):
            make_file(tmp_path / f"f{i}.txt", 1)

        # readings: before pop, entry 1, entry 2, entry 3 -> expired
        walker, visits = run_walk(tmp_path, deadline=Deadline(3, clock=StepClock()))

        assert walker.partial
        assert "timeout" in walker.reason
        assert len(visits) == 2

    def test_unreadable_directory_is_skipped(self, tmp_path, make_file, monkeypatch):
        locked = tmp_path / "locked"
        make_file(locked / "secret.txt", 10)
        make_file(tmp_path / "open" / "ok.txt", 5)

        real_scandir = os.scandir

        def fake_scandir(path):
            if os.fspath(path) == str(locked):
                raise PermissionError(13, "Permission denied", str(locked))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)
        errors = ErrorLog()
        walker = TreeWalker(ScanConfig(root=str(tmp_path)), Deadline.after(60), errors)
        visits = list(walker.walk())

        assert {v.path for v in visits if not v.is_dir} == {str(tmp_path / "open" / "ok.txt")}
        assert errors.permission_denied == 1
        assert errors.errors()[0].path == str(locked)
        assert not walker.partial
        assert walker.dirs_scanned == 2

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs mkfifo")
    def test_special_files_are_not_visited(self, tmp_path):
        os.mkfifo(tmp_path / "pipe")
        walker, visits = run_walk(tmp_path)
        assert visits == []
        assert walker.entries_seen == 1


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
class TestSymlinks:
    def test_symlinks_skipped_by_default(self, tmp_path, make_file):
        target = make_file(tmp_path / "real" / "data.bin", 10)
        os.symlink(target, tmp_path / "link.bin")
        os.symlink(tmp_path / "real", tmp_path / "linkdir")

        walker, visits = run_walk(tmp_path)

        paths = {v.path for v in visits}
        assert str(tmp_path / "link.bin") not in paths
        assert str(tmp_path / "linkdir") not in paths
        assert str(tmp_path / "linkdir") not in walker.aggregates

    def test_symlinks_followed_when_enabled(self, tmp_path, make_file):
        target = make_file(tmp_path / "outside" / "data.bin", 10)
        root = tmp_path / "root"
        root.mkdir()
        os.symlink(target, root / "link.bin")

        _, visits = run_walk(root, follow_symlinks=True)

        [visit] = visits
        assert visit.path == str(root / "link.bin")
        assert visit.info.st_size == 10

    def test_broken_symlink_recorded_when_following(self, tmp_path):
        os.symlink(tmp_path / "missing", tmp_path / "dangling")
        errors = ErrorLog()
        walker = TreeWalker(ScanConfig(root=str(tmp_path), follow_symlinks=True), Deadline.after(60), errors)

        assert list(walker.walk()) == []
        assert [e.path for e in errors.errors()] == [str(tmp_path / "dangling")]

    def test_symlink_cycle_is_not_expanded_twice(self, tmp_path, make_file):
        make_file(tmp_path / "a" / "file.txt", 10)
        os.symlink(tmp_path / "a", tmp_path / "a" / "loop")

        walker, visits = run_walk(tmp_path, follow_symlinks=True, max_depth=12)

        files = [v.path for v in visits if not v.is_dir]
        assert files == [str(tmp_path / "a" / "file.txt")]
        assert not walker.partial
        # The loop is registered under its own path but never expanded
        loop = walker.aggregates[str(tmp_path / "a" / "loop")]
        assert loop.size_bytes == 0
        assert loop.parent == str(tmp_path / "a")
        assert walker.dirs_scanned == 2

    def test_symlink_to_ancestor_of_root(self, tmp_path, make_file):
        root = tmp_path / "root"
        make_file(root / "x.txt", 3)
        os.symlink(root, root / "self")

        walker, visits = run_walk(root, follow_symlinks=True)

        assert [v.path for v in visits if not v.is_dir] == [str(root / "x.txt")]
        assert walker.dirs_scanned == 1
