"""Bounded collections filled while the tree is walked."""

import logging
from typing import Callable, Generic, TypeVar

from diskprobe.models import CleanupCandidate, CleanupCategory, DuplicateCandidate, ScanError, TempAccumulation

log = logging.getLogger(__name__)

T = TypeVar("T")

MAX_SCAN_ERRORS = 200
MAX_CLEANUP_CANDIDATES = 1000
MAX_DUPLICATE_PATHS = 50
MAX_DUPLICATE_GROUPS = 200
MAX_LISTED_FILES = 200  # old downloads, unrotated logs


class TopK(Generic[T]):
    """
    Keep the `limit` largest items by a size key, largest first.

    Once full, a candidate only displaces the current minimum when it is
    strictly larger, so among equal sizes the earliest inserted item stays.
    Sorting is stable, which keeps equal-sized items in insertion order.
    """

    def __init__(self, limit: int, key: Callable[[T], int]):
        self.limit = limit
        self.key = key
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def accepts(self, size: int) -> bool:
        """Whether an item of this size would be kept by add()."""
        if self.limit <= 0:
            return False
        if len(self._items) < self.limit:
            return True
        return size > self.key(self._items[-1])

    def add(self, item: T) -> bool:
        """Insert item if it ranks; returns True when it was kept."""
        if not self.accepts(self.key(item)):
            return False
        if len(self._items) < self.limit:
            self._items.append(item)
        else:
            self._items[-1] = item
        self._items.sort(key=self.key, reverse=True)
        return True

    def items(self) -> list[T]:
        return list(self._items)


class DuplicateIndex:
    """Group files by (size, normalized name)."""

    def __init__(self, max_paths: int = MAX_DUPLICATE_PATHS):
        self.max_paths = max_paths
        self._groups: dict[str, tuple[int, list[str]]] = {}

    def add(self, key: str | None, path: str, size_bytes: int) -> None:
        if key is None:
            return
        group = self._groups.get(key)
        if group is None:
            self._groups[key] = (size_bytes, [path])
            return
        paths = group[1]
        if len(paths) < self.max_paths:
            paths.append(path)

    def candidates(self, limit: int = MAX_DUPLICATE_GROUPS) -> list[DuplicateCandidate]:
        """Groups with at least two members, largest size then most members first."""
        found = [
            DuplicateCandidate(key=key, size_bytes=size, count=len(paths), paths=list(paths))
            for key, (size, paths) in self._groups.items()
            if len(paths) >= 2
        ]
        found.sort(key=lambda d: (d.size_bytes, d.count), reverse=True)
        return found[:limit]


class CleanupIndex:
    """Cleanup candidates de-duplicated by path, capped at `limit` paths."""

    def __init__(self, limit: int = MAX_CLEANUP_CANDIDATES):
        self.limit = limit
        self._by_path: dict[str, CleanupCandidate] = {}

    def __len__(self) -> int:
        return len(self._by_path)

    def add(self, candidate: CleanupCandidate) -> None:
        if not candidate.path or candidate.size_bytes <= 0:
            return
        previous = self._by_path.get(candidate.path)
        if previous is None:
            if len(self._by_path) >= self.limit:
                return
            self._by_path[candidate.path] = candidate
        elif candidate.size_bytes > previous.size_bytes:
            self._by_path[candidate.path] = candidate

    def candidates(self) -> list[CleanupCandidate]:
        ordered = sorted(self._by_path.values(), key=lambda c: c.size_bytes, reverse=True)
        return ordered[: self.limit]


class CategoryTally:
    """Running byte totals per cleanup category (uncapped)."""

    def __init__(self):
        self._bytes: dict[CleanupCategory, int] = {}

    def add(self, category: CleanupCategory, size_bytes: int) -> None:
        self._bytes[category] = self._bytes.get(category, 0) + size_bytes

    def accumulation(self) -> list[TempAccumulation]:
        ordered = sorted(self._bytes.items(), key=lambda kv: (-kv[1], kv[0].value))
        return [TempAccumulation(category=category, size_bytes=size) for category, size in ordered]


class ErrorLog:
    """
    Per-entry failures, capped at `limit` records.

    Permission-denied errors are counted even after the cap is reached.
    """

    def __init__(self, limit: int = MAX_SCAN_ERRORS):
        self.limit = limit
        self.permission_denied = 0
        self._errors: list[ScanError] = []

    def __len__(self) -> int:
        return len(self._errors)

    def record(self, path: str, error: OSError | str) -> None:
        if isinstance(error, PermissionError):
            self.permission_denied += 1
        log.debug("Scan error at %s: %s", path, error)
        if len(self._errors) >= self.limit:
            return
        self._errors.append(ScanError(path=path, error=str(error)))

    def errors(self) -> list[ScanError]:
        return list(self._errors)
