"""Data models for diskprobe."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

# Inclusive bounds every scan parameter is clamped into
LIMITS: dict[str, tuple[int, int]] = {
    "max_depth": (1, 12),
    "top_files": (1, 500),
    "top_dirs": (1, 200),
    "max_entries": (1_000, 1_000_000),
    "timeout_seconds": (5, 120),
}


def clamp_int(value: int, low: int, high: int) -> int:
    """Clamp value into the inclusive range [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units like macOS)."""
    if size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"


class DiskprobeModel(BaseModel):
    """Immutable base model serializing with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_payload(self) -> dict:
        """Dump to a JSON-compatible dict using the wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


class SizedModel(DiskprobeModel):
    """Any record carrying a byte size."""

    size_bytes: int = Field(..., description="Size in bytes")

    @property
    def size_human(self) -> str:
        """Human-readable size string (decimal units like macOS)."""
        return format_size(self.size_bytes)


class CleanupCategory(str, Enum):
    """Categories of reclaimable space."""

    TEMP_FILES = "temp_files"
    BROWSER_CACHE = "browser_cache"
    PACKAGE_CACHE = "package_cache"
    TRASH = "trash"


SAFE_CLEANUP_CATEGORIES = frozenset(CleanupCategory)


class ScanConfig(DiskprobeModel):
    """Validated scan parameters.

    Numeric fields are clamped into LIMITS on construction, so a ScanConfig
    can never carry operator input outside the safe bounds.
    """

    root: str = Field(..., description="Directory to analyze")
    max_depth: int = Field(6, description="Deepest directory level expanded")
    top_files: int = Field(50, description="Size of the largest-files list")
    top_dirs: int = Field(30, description="Size of the largest-directories list")
    max_entries: int = Field(200_000, description="Filesystem entries visited before stopping")
    timeout_seconds: int = Field(20, description="Wall-clock budget for the whole scan")
    follow_symlinks: bool = Field(False, description="Resolve symlinks and treat them as their target")

    @field_validator("max_depth", "top_files", "top_dirs", "max_entries", "timeout_seconds")
    @classmethod
    def clamp_to_limits(cls, value: int, info: ValidationInfo) -> int:
        low, high = LIMITS[info.field_name]
        return clamp_int(value, low, high)


class LargestFile(SizedModel):
    """A file ranked in the largest-files list."""

    path: str
    modified_at: datetime
    owner: str = ""


class LargestDirectory(SizedModel):
    """A directory ranked by cumulative subtree size."""

    path: str
    file_count: int = 0


class TempAccumulation(SizedModel):
    """Total bytes of all files matching one cleanup category."""

    category: CleanupCategory


class OldDownload(SizedModel):
    """A download that has not been modified for a long time."""

    path: str
    modified_at: datetime
    owner: str = ""


class UnrotatedLog(SizedModel):
    """A log file that grew past the rotation threshold."""

    path: str
    modified_at: datetime


class TrashUsage(SizedModel):
    """Space held by one trash/recycle location."""

    path: str


class DuplicateCandidate(SizedModel):
    """Files sharing size and normalized name."""

    key: str = Field(..., description="'<size>|<normalized name>'")
    count: int
    paths: list[str] = Field(default_factory=list)


class CleanupCandidate(SizedModel):
    """A file or directory believed safe to delete to reclaim space."""

    path: str
    category: CleanupCategory
    safe: bool = True
    reason: str = ""
    modified_at: Optional[datetime] = None


class ScanError(DiskprobeModel):
    """A per-entry failure that did not stop the scan."""

    path: str
    error: str


class ScanSummary(DiskprobeModel):
    """Counters describing how much of the tree was covered."""

    files_scanned: int = 0
    dirs_scanned: int = 0
    bytes_scanned: int = 0
    max_depth_reached: int = 0
    permission_denied_count: int = 0

    @property
    def bytes_human(self) -> str:
        return format_size(self.bytes_scanned)


class ScanResult(DiskprobeModel):
    """Complete report of one filesystem analysis."""

    path: str
    started_at: datetime
    completed_at: datetime
    duration_ms: int
    partial: bool = False
    reason: str = ""
    summary: ScanSummary = Field(default_factory=ScanSummary)
    top_largest_files: list[LargestFile] = Field(default_factory=list)
    top_largest_directories: list[LargestDirectory] = Field(default_factory=list)
    temp_accumulation: list[TempAccumulation] = Field(default_factory=list)
    old_downloads: list[OldDownload] = Field(default_factory=list)
    unrotated_logs: list[UnrotatedLog] = Field(default_factory=list)
    trash_usage: list[TrashUsage] = Field(default_factory=list)
    duplicate_candidates: list[DuplicateCandidate] = Field(default_factory=list)
    cleanup_candidates: list[CleanupCandidate] = Field(default_factory=list)
    errors: list[ScanError] = Field(default_factory=list)

    @property
    def total_cleanup_bytes(self) -> int:
        """Total bytes across all cleanup candidates."""
        return sum(c.size_bytes for c in self.cleanup_candidates)


class CommandResult(DiskprobeModel):
    """Response handed back to the command-dispatch layer."""

    status: Literal["completed", "failed"]
    duration_ms: int = 0
    result: Optional[ScanResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "completed"


class CategoryPreview(SizedModel):
    """Per-category totals in a cleanup preview."""

    category: CleanupCategory
    count: int = 0


class CleanupPreview(DiskprobeModel):
    """What a safe cleanup of a report would reclaim."""

    estimated_bytes: int = 0
    candidate_count: int = 0
    categories: list[CategoryPreview] = Field(default_factory=list)
    candidates: list[CleanupCandidate] = Field(default_factory=list)

    @property
    def estimated_human(self) -> str:
        return format_size(self.estimated_bytes)
