"""Command dispatch boundary: untyped request payloads in, CommandResults out."""

import logging
import time
from typing import Any, Callable

from diskprobe.analyzer import analyze_filesystem
from diskprobe.config import resolve_scan_config
from diskprobe.errors import DiskprobeError
from diskprobe.models import CommandResult
from diskprobe.system import OwnerResolver, TrashPathProvider
from diskprobe.walker import Deadline

log = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def run_analyze_filesystem(
    payload: dict[str, Any],
    *,
    defaults: dict[str, Any] | None = None,
    deadline: Deadline | None = None,
    owner_resolver: OwnerResolver | None = None,
    trash_paths: TrashPathProvider | None = None,
) -> CommandResult:
    """
    Execute an "analyze this path" request.

    Args:
        payload: Request fields (path, maxDepth, topFiles, topDirs, maxEntries,
            timeoutSeconds, followSymlinks)
        defaults: Defaults for omitted fields (see config.load_defaults)
        deadline: Overrides the deadline derived from timeoutSeconds
        owner_resolver: Owner lookup strategy
        trash_paths: Trash location provider

    Returns:
        CommandResult - completed with the ScanResult, or failed with the cause
        when the request could not start (bad payload, bad root)
    """
    started = time.monotonic()

    try:
        config = resolve_scan_config(payload, defaults)
        analysis = analyze_filesystem(
            config,
            deadline=deadline,
            owner_resolver=owner_resolver,
            trash_paths=trash_paths,
        )
    except DiskprobeError as e:
        log.info("Filesystem analysis request rejected: %s", e)
        return CommandResult(status="failed", error=str(e), duration_ms=_elapsed_ms(started))
    except Exception as e:
        log.exception("Filesystem analysis failed unexpectedly")
        return CommandResult(status="failed", error=str(e), duration_ms=_elapsed_ms(started))

    return CommandResult(status="completed", result=analysis, duration_ms=analysis.duration_ms)


class CommandRegistry:
    """Routes named commands to their handlers."""

    def __init__(self):
        self.handlers: dict[str, Callable[[dict[str, Any]], CommandResult]] = {
            "analyze_filesystem": run_analyze_filesystem,
            "filesystem_analysis": run_analyze_filesystem,
        }

    def execute(self, name: str, payload: dict[str, Any]) -> CommandResult:
        """Execute a command and return its result.

        Args:
            name: Command name
            payload: Command arguments

        Returns:
            CommandResult; unknown commands yield a failed result
        """
        handler = self.handlers.get(name)
        if not handler:
            return CommandResult(status="failed", error=f"Unknown command: {name}")
        return handler(payload)
