from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class FileRecord:
    path: str  # absolute
    atime: float
    size: int


@dataclass
class ScanStats:
    files: int = 0
    bytes: int = 0
    failed_files: int = 0
    failed_dirs: int = 0
    elapsed_sec: float = 0.0
