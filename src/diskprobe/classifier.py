"""Per-file heuristics: cleanup category, old downloads, unrotated logs, duplicate keys.

All path checks run on a normalized form (forward slashes, lower case) so the
same rules apply to Windows, macOS and Linux paths.
"""

import os
from datetime import datetime, timedelta

from diskprobe.models import CleanupCategory

OLD_DOWNLOAD_AGE = timedelta(days=30)
UNROTATED_LOG_MIN_BYTES = 100 * 1024 * 1024

# Checked in order; the first category with a matching fragment wins.
# Fragments are matched as substrings of the normalized path.
CLEANUP_PATH_FRAGMENTS: list[tuple[CleanupCategory, tuple[str, ...]]] = [
    (
        CleanupCategory.TEMP_FILES,
        (
            "/tmp/",
            "/windows/temp/",
            "/appdata/local/temp/",
            "/var/tmp/",
        ),
    ),
    (
        CleanupCategory.BROWSER_CACHE,
        (
            "/google/chrome/user data/",
            "/mozilla/firefox/",
            "/library/caches/com.apple.safari/",
            "/library/caches/",
            "/.cache/",
            "/edge/user data/",
        ),
    ),
    (
        CleanupCategory.PACKAGE_CACHE,
        (
            "/var/cache/apt/",
            "/var/cache/dnf/",
            "/var/cache/yum/",
            "/library/caches/homebrew/",
            "/appdata/local/packages/",
        ),
    ),
]

# Suffixes file managers add when copying a file next to the original
COPY_MARKERS = (" (copy)", " - copy")


def normalize_path(path: str) -> str:
    """Forward slashes and lower case, for platform-agnostic matching."""
    return path.replace("\\", "/").lower()


def classify_cleanup_category(path: str) -> CleanupCategory | None:
    """Return the cleanup category a file path falls under, if any."""
    normalized = normalize_path(path)
    for category, fragments in CLEANUP_PATH_FRAGMENTS:
        if category == CleanupCategory.TEMP_FILES and normalized.endswith("/tmp"):
            return category
        if any(fragment in normalized for fragment in fragments):
            return category
    return None


def old_download_threshold(now: datetime) -> datetime:
    """Files in Downloads modified at or before this instant count as old."""
    return now - OLD_DOWNLOAD_AGE


def is_old_download(path: str, modified_at: datetime, threshold: datetime) -> bool:
    """
    Check whether a file is a stale download.

    Args:
        path: File path
        modified_at: Last modification time of the file
        threshold: Cut-off from old_download_threshold(), computed once per scan

    Returns:
        True if the file lives under a Downloads folder and is not newer than threshold
    """
    if modified_at > threshold:
        return False
    normalized = normalize_path(path)
    return "/downloads/" in normalized or normalized.endswith("/downloads")


def is_unrotated_log(path: str, size_bytes: int) -> bool:
    """Check whether a file is a .log that has grown past the rotation threshold."""
    if size_bytes < UNROTATED_LOG_MIN_BYTES:
        return False
    return normalize_path(path).endswith(".log")


def normalize_duplicate_name(name: str) -> str:
    """Lower-case a base name and drop copy markers such as ' (copy)'."""
    normalized = name.strip().lower()
    for marker in COPY_MARKERS:
        normalized = normalized.replace(marker, "")
    return normalized


def duplicate_key(path: str, size_bytes: int) -> str | None:
    """
    Composite key grouping likely duplicates.

    Returns:
        '<size>|<normalized base name>', or None for empty files and nameless paths
    """
    if size_bytes <= 0:
        return None
    base = normalize_duplicate_name(os.path.basename(path.replace("\\", "/")))
    if not base:
        return None
    return f"{size_bytes}|{base}"
