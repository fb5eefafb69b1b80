"""Assemble scan output into a deterministic report, and preview cleanups."""

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from diskprobe.errors import PayloadError
from diskprobe.models import (
    SAFE_CLEANUP_CATEGORIES,
    CategoryPreview,
    CleanupCandidate,
    CleanupCategory,
    CleanupPreview,
    DuplicateCandidate,
    LargestDirectory,
    LargestFile,
    OldDownload,
    ScanError,
    ScanResult,
    ScanSummary,
    TempAccumulation,
    TrashUsage,
    UnrotatedLog,
)


def by_size(items: list, limit: int | None = None) -> list:
    """Sort largest first (stable, so ties keep their order) and truncate."""
    ordered = sorted(items, key=lambda item: item.size_bytes, reverse=True)
    return ordered if limit is None else ordered[:limit]


def assemble_report(
    *,
    path: str,
    started_at: datetime,
    completed_at: datetime,
    duration_ms: int,
    partial: bool,
    reason: str,
    summary: ScanSummary,
    largest_files: list[LargestFile],
    largest_directories: list[LargestDirectory],
    temp_accumulation: list[TempAccumulation],
    old_downloads: list[OldDownload],
    unrotated_logs: list[UnrotatedLog],
    trash_usage: list[TrashUsage],
    duplicate_candidates: list[DuplicateCandidate],
    cleanup_candidates: list[CleanupCandidate],
    errors: list[ScanError],
) -> ScanResult:
    """
    Merge collector outputs into one immutable ScanResult.

    Every size-bearing list is re-sorted largest first here; collectors already
    apply their caps, and sorting is stable so their tie order is kept.
    """
    return ScanResult(
        path=path,
        started_at=started_at,
        completed_at=completed_at,
        duration_ms=duration_ms,
        partial=partial,
        reason=reason if partial else "",
        summary=summary,
        top_largest_files=by_size(largest_files),
        top_largest_directories=by_size(largest_directories),
        temp_accumulation=temp_accumulation,
        old_downloads=by_size(old_downloads),
        unrotated_logs=by_size(unrotated_logs),
        trash_usage=by_size(trash_usage),
        duplicate_candidates=duplicate_candidates,
        cleanup_candidates=by_size(cleanup_candidates),
        errors=errors,
    )


def parse_categories(names: list[str] | None) -> set[CleanupCategory] | None:
    """Turn requested category names into a set; None or empty means all."""
    if not names:
        return None
    selected = set()
    for name in names:
        try:
            selected.add(CleanupCategory(name))
        except ValueError:
            valid = ", ".join(c.value for c in CleanupCategory)
            raise PayloadError(f"unknown cleanup category: {name} (expected one of {valid})") from None
    return selected


def build_cleanup_preview(
    analysis: ScanResult,
    categories: list[str] | None = None,
) -> CleanupPreview:
    """
    Summarize what a safe cleanup of a report would reclaim.

    Nothing is deleted; this only filters and totals the report's candidates.

    Args:
        analysis: Completed (possibly partial) scan report
        categories: Restrict to these category names (default: all safe ones)

    Returns:
        CleanupPreview with candidates sorted largest first

    Raises:
        PayloadError: if a requested category is unknown
    """
    requested = parse_categories(categories)

    deduped: dict[str, CleanupCandidate] = {}
    for candidate in analysis.cleanup_candidates:
        if not candidate.safe or candidate.category not in SAFE_CLEANUP_CATEGORIES:
            continue
        if requested is not None and candidate.category not in requested:
            continue
        existing = deduped.get(candidate.path)
        if existing is None or candidate.size_bytes > existing.size_bytes:
            deduped[candidate.path] = candidate

    candidates = by_size(list(deduped.values()))

    # category -> [count, bytes], in first-seen order
    totals: dict[CleanupCategory, list[int]] = {}
    for candidate in candidates:
        entry = totals.setdefault(candidate.category, [0, 0])
        entry[0] += 1
        entry[1] += candidate.size_bytes

    return CleanupPreview(
        estimated_bytes=sum(c.size_bytes for c in candidates),
        candidate_count=len(candidates),
        categories=[
            CategoryPreview(category=category, count=count, size_bytes=size)
            for category, (count, size) in totals.items()
        ],
        candidates=candidates,
    )


def load_saved_report(data: Any) -> ScanResult:
    """
    Rebuild a ScanResult from saved JSON.

    Accepts either the CommandResult printed by `analyze --json` / `run` or a
    bare report object.

    Raises:
        PayloadError: if the data is a failed result or not a valid report
    """
    if isinstance(data, dict) and "status" in data:
        if data.get("status") != "completed" or data.get("result") is None:
            raise PayloadError(f"saved result has no report: {data.get('error') or data.get('status')}")
        data = data["result"]
    try:
        return ScanResult.model_validate(data)
    except ValidationError as e:
        raise PayloadError(f"invalid saved report ({e.error_count()} errors)") from e
