from __future__ import annotations
from typing import Iterable

from blob_cleaner.scan.records import FileRecord


def rank_candidates(records: Iterable[FileRecord]) -> list[FileRecord]:
    """Oldest access first. sorted() is stable, so ties keep their input order."""
    return sorted(records, key=lambda r: r.atime)
