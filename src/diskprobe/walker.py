"""Bounded depth-first traversal of a directory tree.

The walker uses an explicit stack instead of recursion, checks the deadline
and the entry budget before every unit of work, and stops with a partial
flag instead of failing when a bound is hit.
"""

import logging
import os
import stat
import time
from dataclasses import dataclass
from typing import Callable, Iterator

from diskprobe.collectors import ErrorLog
from diskprobe.models import ScanConfig

log = logging.getLogger(__name__)

REASON_TIMEOUT = "timeout reached"
REASON_MAX_ENTRIES = "max entries reached"


class Deadline:
    """A wall-clock cut-off shared by every phase of one scan."""

    def __init__(self, expires_at: float, clock: Callable[[], float] = time.monotonic):
        self.expires_at = expires_at
        self.clock = clock

    @classmethod
    def after(cls, seconds: float, clock: Callable[[], float] = time.monotonic) -> "Deadline":
        return cls(clock() + seconds, clock)

    def expired(self) -> bool:
        return self.clock() > self.expires_at

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self.clock())


@dataclass
class DirectoryAggregate:
    """Sizes attributed to one directory; cumulative after roll-up."""

    path: str
    parent: str
    depth: int
    size_bytes: int = 0
    file_count: int = 0


@dataclass
class Visit:
    """One entry reached by the walker (after symlink resolution)."""

    path: str
    parent: str
    depth: int
    info: os.stat_result
    is_dir: bool


class TreeWalker:
    """
    Iterative walker enforcing depth, entry and time bounds.

    Iterate walk() to receive Visits; files are already added to their parent's
    DirectoryAggregate when yielded. After iteration, `partial` and `reason`
    tell whether a bound stopped the walk early.
    """

    def __init__(self, config: ScanConfig, deadline: Deadline, errors: ErrorLog):
        self.config = config
        self.deadline = deadline
        self.errors = errors

        root = config.root
        self.aggregates: dict[str, DirectoryAggregate] = {
            root: DirectoryAggregate(path=root, parent="", depth=0)
        }
        self._visited: set[str] = {self._canonical(root)}
        self._stack: list[tuple[str, int]] = [(root, 0)]

        self.entries_seen = 0
        self.dirs_scanned = 0
        self.max_depth_reached = 0
        self.partial = False
        self.reason = ""

    def _canonical(self, path: str) -> str:
        if not self.config.follow_symlinks:
            return path
        try:
            return os.path.realpath(path)
        except OSError:
            return path

    def _stop(self, reason: str) -> None:
        self.partial = True
        if not self.reason:
            self.reason = reason
        log.info("Stopping walk of %s early: %s", self.config.root, reason)

    def _list_dir(self, path: str) -> list[os.DirEntry] | None:
        try:
            with os.scandir(path) as it:
                return list(it)
        except OSError as e:
            self.errors.record(path, e)
            return None

    def _entry_info(self, entry: os.DirEntry) -> os.stat_result | None:
        """Stat an entry, resolving symlinks only when configured to."""
        try:
            info = entry.stat(follow_symlinks=False)
        except OSError as e:
            self.errors.record(entry.path, e)
            return None

        if not stat.S_ISLNK(info.st_mode):
            return info
        if not self.config.follow_symlinks:
            return None

        try:
            return os.stat(entry.path)
        except OSError as e:
            self.errors.record(entry.path, e)
            return None

    def _register_dir(self, path: str, parent: str, depth: int) -> None:
        if path not in self.aggregates:
            self.aggregates[path] = DirectoryAggregate(path=path, parent=parent, depth=depth)

        if depth > self.config.max_depth:
            return
        canonical = self._canonical(path)
        if canonical in self._visited:
            return
        self._visited.add(canonical)
        self._stack.append((path, depth))

    def walk(self) -> Iterator[Visit]:
        """Yield every file and directory reached, depth first."""
        while self._stack:
            if self.deadline.expired():
                self._stop(REASON_TIMEOUT)
                return

            current, depth = self._stack.pop()
            entries = self._list_dir(current)
            if entries is None:
                continue

            self.dirs_scanned += 1
            self.max_depth_reached = max(self.max_depth_reached, depth)

            for entry in entries:
                if self.deadline.expired():
                    self._stop(REASON_TIMEOUT)
                    return
                self.entries_seen += 1
                if self.entries_seen > self.config.max_entries:
                    self._stop(REASON_MAX_ENTRIES)
                    return

                info = self._entry_info(entry)
                if info is None:
                    continue

                if stat.S_ISDIR(info.st_mode):
                    self._register_dir(entry.path, current, depth + 1)
                    yield Visit(path=entry.path, parent=current, depth=depth + 1, info=info, is_dir=True)
                    continue

                if not stat.S_ISREG(info.st_mode):
                    continue

                parent = self.aggregates.get(current)
                if parent is not None:
                    parent.size_bytes += max(info.st_size, 0)
                    parent.file_count += 1
                yield Visit(path=entry.path, parent=current, depth=depth, info=info, is_dir=False)
