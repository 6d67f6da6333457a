"""Test fixtures: blob trees with controlled access times and a fake disk probe."""
import os
from pathlib import Path

import pytest

from blob_cleaner.disk.usage import UsageSnapshot
from blob_cleaner.units import BYTES_PER_MB

_SETTINGS_ENV = (
    "DISK_THRESHOLD",
    "SELECTION_POLICY",
    "RECLAIM_FRACTION",
    "AVG_BLOB_SIZE_MB",
    "FIXED_EVICT_COUNT",
    "SCAN_WORKERS",
    "PROGRESS_EVERY",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """No settings leak in from the real environment or a stray .env file."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def blob_root(tmp_path: Path) -> Path:
    root = tmp_path / "blobs"
    root.mkdir()
    return root


@pytest.fixture
def write_blob():
    """Creates root/<shard>/<name> with the given access time."""

    def _write(root: Path, shard: str, name: str, atime: float, size: int = 16) -> Path:
        path = root / shard / name if shard else root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        os.utime(path, (atime, atime))
        return path

    return _write


def usage(used_mb: float, total_mb: float) -> UsageSnapshot:
    used = int(used_mb * BYTES_PER_MB)
    total = int(total_mb * BYTES_PER_MB)
    return UsageSnapshot(total_bytes=total, used_bytes=used, fill_ratio=used / total)


class FakeProbe:
    """Returns the given snapshots in order, repeating the last one."""

    def __init__(self, *snapshots: UsageSnapshot) -> None:
        self.snapshots = list(snapshots)
        self.calls: list[str] = []

    def __call__(self, root) -> UsageSnapshot:
        self.calls.append(os.fspath(root))
        return self.snapshots[min(len(self.calls), len(self.snapshots)) - 1]


@pytest.fixture
def fake_probe(monkeypatch):
    """Replaces the disk probe used by the cleanup run."""

    def _install(*snapshots: UsageSnapshot) -> FakeProbe:
        probe = FakeProbe(*snapshots)
        monkeypatch.setattr("blob_cleaner.cleaner.probe_usage", probe)
        return probe

    return _install


@pytest.fixture
def make_usage():
    return usage
