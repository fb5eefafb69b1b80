"""Scan defaults, operator config file and request parsing for diskprobe."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from diskprobe.errors import PayloadError
from diskprobe.models import ScanConfig

log = logging.getLogger(__name__)

# Request key -> (ScanConfig field, hard default)
INT_FIELDS: dict[str, tuple[str, int]] = {
    "maxDepth": ("max_depth", 6),
    "topFiles": ("top_files", 50),
    "topDirs": ("top_dirs", 30),
    "maxEntries": ("max_entries", 200_000),
    "timeoutSeconds": ("timeout_seconds", 20),
}
DEFAULT_FOLLOW_SYMLINKS = False

CONFIG_ENV_VAR = "DISKPROBE_CONFIG"


def expand_path(path: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(path)))


def config_file_path() -> Path:
    """Location of the operator config file."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return expand_path(override)
    return expand_path("~/.diskprobe/config.json")


def hard_defaults() -> dict[str, Any]:
    """Built-in defaults keyed by request name."""
    defaults: dict[str, Any] = {key: default for key, (_, default) in INT_FIELDS.items()}
    defaults["followSymlinks"] = DEFAULT_FOLLOW_SYMLINKS
    return defaults


def load_defaults(path: Path | None = None) -> dict[str, Any]:
    """
    Load scan defaults, overlaying the operator config file on the hard defaults.

    The file is JSON with a "defaults" object using request key names, e.g.
    {"defaults": {"maxDepth": 8, "timeoutSeconds": 60}}. Unknown keys are ignored.

    Args:
        path: Config file to read (defaults to config_file_path())

    Returns:
        Dict of request key -> default value
    """
    defaults = hard_defaults()
    path = path or config_file_path()

    if not path.exists():
        return defaults

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable config file %s: %s", path, e)
        return defaults

    overrides = data.get("defaults", {}) if isinstance(data, dict) else {}
    if not isinstance(overrides, dict):
        log.warning("Ignoring config file %s: 'defaults' is not an object", path)
        return defaults

    for key, value in overrides.items():
        if key not in defaults:
            log.debug("Unknown config key %r in %s", key, path)
            continue
        if key == "followSymlinks":
            defaults[key] = _coerce_bool(value, defaults[key])
        else:
            defaults[key] = _coerce_int(value, defaults[key])

    return defaults


def _coerce_int(value: Any, default: int) -> int:
    """Interpret a loosely typed payload value as an int."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else default
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return default


def require_path(payload: dict[str, Any]) -> str:
    """Return the mandatory 'path' field or raise PayloadError."""
    value = payload.get("path")
    if not isinstance(value, str) or not value.strip():
        raise PayloadError("missing required field: path")
    return value


def resolve_scan_config(
    payload: dict[str, Any],
    defaults: dict[str, Any] | None = None,
) -> ScanConfig:
    """
    Parse an untyped request payload into a clamped ScanConfig.

    Args:
        payload: Request key/value pairs (path, maxDepth, topFiles, ...)
        defaults: Defaults for omitted keys (see load_defaults)

    Returns:
        ScanConfig with every limit clamped into its safe range

    Raises:
        PayloadError: if the payload is not a mapping or has no usable path
    """
    if not isinstance(payload, dict):
        raise PayloadError("payload must be an object")

    if defaults is None:
        defaults = load_defaults()

    root = os.path.normpath(os.path.abspath(require_path(payload)))

    values: dict[str, Any] = {"root": root}
    for key, (field_name, hard_default) in INT_FIELDS.items():
        default = defaults.get(key, hard_default)
        values[field_name] = _coerce_int(payload.get(key, default), default)

    default_follow = defaults.get("followSymlinks", DEFAULT_FOLLOW_SYMLINKS)
    values["follow_symlinks"] = _coerce_bool(payload.get("followSymlinks", default_follow), default_follow)

    return ScanConfig(**values)
