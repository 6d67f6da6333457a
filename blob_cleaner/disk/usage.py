from __future__ import annotations
import os
from dataclasses import dataclass


class ProbeError(Exception):
    """The filesystem holding the blob root could not be measured."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"statvfs {path}: {reason}")
        self.path = path


@dataclass(frozen=True)
class UsageSnapshot:
    total_bytes: int
    used_bytes: int
    fill_ratio: float


def probe_usage(root: str | os.PathLike) -> UsageSnapshot:
    """Returns a fresh usage snapshot for the filesystem that holds root."""
    path = os.fspath(root)
    try:
        st = os.statvfs(path)
    except OSError as e:
        raise ProbeError(path, e.strerror or str(e)) from e

    total = st.f_blocks * st.f_frsize
    free = st.f_bfree * st.f_frsize
    if total <= 0:
        raise ProbeError(path, "filesystem reports zero total bytes")
    used = total - free
    return UsageSnapshot(total_bytes=total, used_bytes=used, fill_ratio=used / total)
