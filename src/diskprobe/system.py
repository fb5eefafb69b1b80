"""Platform collaborators: file owner lookup and trash locations.

Both are plain callables so the analyzer can be handed a different strategy
(tests use fakes; a Windows agent gets the no-op owner resolver).
"""

import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Callable

OwnerResolver = Callable[[os.stat_result], str]
TrashPathProvider = Callable[[], list[str]]


@lru_cache(maxsize=1024)
def _username_for_uid(uid: int) -> str:
    import pwd

    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        # Unknown uid, report the number like `ls -l` does
        return str(uid)


def posix_file_owner(info: os.stat_result) -> str:
    """Best-effort owner name for a stat result; never raises."""
    uid = getattr(info, "st_uid", None)
    if uid is None:
        return ""
    try:
        return _username_for_uid(uid)
    except (ImportError, OSError):
        return ""


def no_file_owner(info: os.stat_result) -> str:
    """Owner lookup on Windows needs ACL interrogation; left empty."""
    return ""


def select_owner_resolver(platform: str | None = None) -> OwnerResolver:
    """Pick the owner resolver for a platform (defaults to the running one)."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return no_file_owner
    return posix_file_owner


def get_trash_paths(platform: str | None = None) -> list[str]:
    """
    Well-known trash/recycle locations for a platform.

    Args:
        platform: sys.platform style name (defaults to the running one)

    Returns:
        Candidate trash directories; they may not exist
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        return ["C:\\$Recycle.Bin"]

    try:
        home = Path.home()
    except RuntimeError:
        return []

    if platform == "darwin":
        return [str(home / ".Trash")]
    if platform.startswith("linux"):
        data_home = Path(os.environ.get("XDG_DATA_HOME", home / ".local" / "share"))
        return [str(data_home / "Trash")]
    return []
