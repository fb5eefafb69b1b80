"""Shared test fixtures."""

import os
import time
from pathlib import Path

import pytest

from diskprobe.analyzer import analyze_filesystem
from diskprobe.models import ScanConfig

DAY = 24 * 60 * 60


@pytest.fixture(autouse=True)
def isolate_config(tmp_path_factory, monkeypatch):
    """Keep the operator's ~/.diskprobe/config.json out of tests."""
    missing = tmp_path_factory.mktemp("config") / "config.json"
    monkeypatch.setenv("DISKPROBE_CONFIG", str(missing))
    return missing


def _make_file(path: Path, size: int = 0, age_days: float | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    if age_days is not None:
        mtime = time.time() - age_days * DAY
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def make_file():
    """Create a (sparse) file of the given size, optionally back-dated by age_days."""
    return _make_file


@pytest.fixture
def scan():
    """Analyze a directory with fake owner and trash collaborators."""

    def _scan(root: Path, trash=(), deadline=None, **overrides):
        config = ScanConfig(root=str(root), **overrides)
        return analyze_filesystem(
            config,
            deadline=deadline,
            owner_resolver=lambda info: "tester",
            trash_paths=lambda: [str(p) for p in trash],
        )

    return _scan
