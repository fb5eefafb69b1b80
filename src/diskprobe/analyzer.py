"""Filesystem analysis: walk a tree once and compute every report section."""

import logging
import os
import stat
import time
from datetime import datetime, timezone

from diskprobe.aggregator import roll_up
from diskprobe.classifier import (
    classify_cleanup_category,
    duplicate_key,
    is_old_download,
    is_unrotated_log,
    old_download_threshold,
)
from diskprobe.collectors import (
    MAX_LISTED_FILES,
    CategoryTally,
    CleanupIndex,
    DuplicateIndex,
    ErrorLog,
    TopK,
)
from diskprobe.errors import ScanRootError
from diskprobe.models import (
    CleanupCandidate,
    CleanupCategory,
    LargestDirectory,
    LargestFile,
    OldDownload,
    ScanConfig,
    ScanResult,
    ScanSummary,
    TrashUsage,
    UnrotatedLog,
)
from diskprobe.report import assemble_report
from diskprobe.system import OwnerResolver, TrashPathProvider, get_trash_paths, select_owner_resolver
from diskprobe.trash import estimate_trash_usage
from diskprobe.walker import Deadline, TreeWalker, Visit

log = logging.getLogger(__name__)

REASON_TRASH_TIMEOUT = "timeout reached while scanning trash"


def validate_root(root: str) -> None:
    """
    Ensure the scan root exists and is a directory.

    Raises:
        ScanRootError: if root cannot be stat'ed or is not a directory
    """
    try:
        info = os.stat(root)
    except OSError as e:
        raise ScanRootError(f"failed to stat path: {e}") from e
    if not stat.S_ISDIR(info.st_mode):
        raise ScanRootError(f"path is not a directory: {root}")


class FileCollectors:
    """Everything fed by the per-file classifier during one walk."""

    def __init__(self, config: ScanConfig, now: datetime, owner_resolver: OwnerResolver):
        self.owner_resolver = owner_resolver
        self.download_threshold = old_download_threshold(now)

        self.files_scanned = 0
        self.bytes_scanned = 0

        self.largest_files: TopK[LargestFile] = TopK(config.top_files, key=lambda f: f.size_bytes)
        self.old_downloads: TopK[OldDownload] = TopK(MAX_LISTED_FILES, key=lambda f: f.size_bytes)
        self.unrotated_logs: TopK[UnrotatedLog] = TopK(MAX_LISTED_FILES, key=lambda f: f.size_bytes)
        self.duplicates = DuplicateIndex()
        self.cleanup = CleanupIndex()
        self.temp_bytes = CategoryTally()

    def observe(self, visit: Visit) -> None:
        """Classify one regular file and feed every collector it qualifies for."""
        path = visit.path
        size = max(visit.info.st_size, 0)
        modified_at = datetime.fromtimestamp(visit.info.st_mtime, tz=timezone.utc)

        self.files_scanned += 1
        self.bytes_scanned += size

        if self.largest_files.accepts(size):
            self.largest_files.add(
                LargestFile(
                    path=path,
                    size_bytes=size,
                    modified_at=modified_at,
                    owner=self.owner_resolver(visit.info),
                )
            )

        category = classify_cleanup_category(path)
        if category is not None:
            self.temp_bytes.add(category, size)
            self.cleanup.add(
                CleanupCandidate(
                    path=path,
                    category=category,
                    size_bytes=size,
                    safe=True,
                    reason="temporary/cache file",
                    modified_at=modified_at,
                )
            )

        if is_old_download(path, modified_at, self.download_threshold) and self.old_downloads.accepts(size):
            self.old_downloads.add(
                OldDownload(
                    path=path,
                    size_bytes=size,
                    modified_at=modified_at,
                    owner=self.owner_resolver(visit.info),
                )
            )

        if is_unrotated_log(path, size):
            self.unrotated_logs.add(UnrotatedLog(path=path, size_bytes=size, modified_at=modified_at))

        self.duplicates.add(duplicate_key(path, size), path, size)


def analyze_filesystem(
    config: ScanConfig,
    *,
    deadline: Deadline | None = None,
    owner_resolver: OwnerResolver | None = None,
    trash_paths: TrashPathProvider | None = None,
) -> ScanResult:
    """
    Analyze the directory tree at config.root.

    The tree is walked once; largest files, cleanup candidates, old downloads,
    unrotated logs and duplicate groups are collected along the way. Directory
    totals are rolled up afterwards, then trash locations are estimated with
    what is left of the time and entry budgets.

    Args:
        config: Clamped scan parameters
        deadline: Overall cut-off (defaults to config.timeout_seconds from now)
        owner_resolver: Owner lookup strategy (defaults to the platform's)
        trash_paths: Trash location provider (defaults to the platform's)

    Returns:
        ScanResult, flagged partial when a bound stopped the scan early

    Raises:
        ScanRootError: if config.root is missing or not a directory
    """
    started = time.monotonic()
    started_at = datetime.now(timezone.utc)

    validate_root(config.root)

    deadline = deadline or Deadline.after(config.timeout_seconds)
    owner_resolver = owner_resolver or select_owner_resolver()
    trash_paths = trash_paths or get_trash_paths

    log.info(
        "Analyzing %s (max_depth=%d, max_entries=%d, timeout=%ds, follow_symlinks=%s)",
        config.root,
        config.max_depth,
        config.max_entries,
        config.timeout_seconds,
        config.follow_symlinks,
    )

    errors = ErrorLog()
    walker = TreeWalker(config, deadline, errors)
    files = FileCollectors(config, started_at, owner_resolver)

    for visit in walker.walk():
        if not visit.is_dir:
            files.observe(visit)

    aggregates = roll_up(walker.aggregates)
    largest_dirs: TopK[LargestDirectory] = TopK(config.top_dirs, key=lambda d: d.size_bytes)
    for agg in aggregates.values():
        if largest_dirs.accepts(agg.size_bytes):
            largest_dirs.add(
                LargestDirectory(path=agg.path, size_bytes=agg.size_bytes, file_count=agg.file_count)
            )

    partial = walker.partial
    reason = walker.reason

    trash_budget = max(config.max_entries - walker.entries_seen, 0) // 2
    trash_usage = []
    for estimate in estimate_trash_usage(trash_paths(), deadline, trash_budget, errors):
        if estimate.timed_out:
            partial = True
            if not reason:
                reason = REASON_TRASH_TIMEOUT
        if estimate.size_bytes <= 0:
            continue
        trash_usage.append(TrashUsage(path=estimate.path, size_bytes=estimate.size_bytes))
        files.cleanup.add(
            CleanupCandidate(
                path=estimate.path,
                category=CleanupCategory.TRASH,
                size_bytes=estimate.size_bytes,
                safe=True,
                reason="trash/recycle bin cleanup",
            )
        )

    summary = ScanSummary(
        files_scanned=files.files_scanned,
        dirs_scanned=walker.dirs_scanned,
        bytes_scanned=files.bytes_scanned,
        max_depth_reached=walker.max_depth_reached,
        permission_denied_count=errors.permission_denied,
    )

    completed_at = datetime.now(timezone.utc)
    duration_ms = int((time.monotonic() - started) * 1000)

    if partial:
        log.info("Analysis of %s is partial: %s", config.root, reason)
    log.info(
        "Analyzed %s: %d files, %d dirs, %s in %dms",
        config.root,
        summary.files_scanned,
        summary.dirs_scanned,
        summary.bytes_human,
        duration_ms,
    )

    return assemble_report(
        path=config.root,
        started_at=started_at,
        completed_at=completed_at,
        duration_ms=duration_ms,
        partial=partial,
        reason=reason,
        summary=summary,
        largest_files=files.largest_files.items(),
        largest_directories=largest_dirs.items(),
        temp_accumulation=files.temp_bytes.accumulation(),
        old_downloads=files.old_downloads.items(),
        unrotated_logs=files.unrotated_logs.items(),
        trash_usage=trash_usage,
        duplicate_candidates=files.duplicates.candidates(),
        cleanup_candidates=files.cleanup.candidates(),
        errors=errors.errors(),
    )
