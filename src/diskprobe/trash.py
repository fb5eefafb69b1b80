"""Size estimates for trash/recycle locations."""

import logging
import os
import stat
from dataclasses import dataclass

from diskprobe.collectors import ErrorLog
from diskprobe.walker import Deadline

log = logging.getLogger(__name__)


@dataclass
class TrashEstimate:
    """Bytes found under one trash location."""

    path: str
    size_bytes: int = 0
    files: int = 0
    timed_out: bool = False


def estimate_directory_size(root: str, deadline: Deadline, max_entries: int) -> TrashEstimate:
    """
    Sum file sizes below root without classifying anything.

    Symlinks are never followed and unreadable subdirectories are skipped.
    The estimate is cut short (timed_out=True) when the deadline passes or
    more than max_entries entries have been seen.

    Args:
        root: Directory (or file) to measure
        deadline: Shared scan deadline
        max_entries: Entry budget for this location

    Returns:
        TrashEstimate for root

    Raises:
        OSError: if root cannot be stat'ed, or a directory fails to list for
            a reason other than permissions
    """
    info = os.stat(root)
    if not stat.S_ISDIR(info.st_mode):
        return TrashEstimate(path=root, size_bytes=max(info.st_size, 0), files=1)

    estimate = TrashEstimate(path=root)
    stack = [root]
    entries_seen = 0

    while stack:
        if deadline.expired():
            estimate.timed_out = True
            return estimate

        current = stack.pop()
        try:
            with os.scandir(current) as it:
                children = list(it)
        except PermissionError:
            continue

        for child in children:
            entries_seen += 1
            if entries_seen > max_entries or deadline.expired():
                estimate.timed_out = True
                return estimate

            try:
                child_info = child.stat(follow_symlinks=False)
            except OSError:
                continue

            if stat.S_ISLNK(child_info.st_mode):
                continue
            if stat.S_ISDIR(child_info.st_mode):
                stack.append(child.path)
                continue

            estimate.size_bytes += max(child_info.st_size, 0)
            estimate.files += 1

    return estimate


def estimate_trash_usage(
    paths: list[str],
    deadline: Deadline,
    max_entries: int,
    errors: ErrorLog,
) -> list[TrashEstimate]:
    """
    Estimate every trash location, tolerating ones that do not exist.

    Args:
        paths: Candidate trash directories
        deadline: Shared scan deadline
        max_entries: Entry budget per location
        errors: Where failures other than "does not exist" are recorded

    Returns:
        Estimates for the locations that could be measured
    """
    estimates = []
    for path in paths:
        try:
            estimate = estimate_directory_size(path, deadline, max_entries)
        except FileNotFoundError:
            continue
        except OSError as e:
            errors.record(path, e)
            continue

        if estimate.timed_out:
            log.info("Trash estimate for %s was cut short", path)
        estimates.append(estimate)
    return estimates
