from __future__ import annotations
import logging
import os
from typing import Iterable

from blob_cleaner.scan.records import FileRecord

log = logging.getLogger("blob_cleaner")


class DeletionError(Exception):
    """Removal stopped at `path`; the `deleted` files before it are gone for good."""

    def __init__(self, path: str, deleted: int, reason: str):
        super().__init__(f"remove {path}: {reason} ({deleted} files already deleted)")
        self.path = path
        self.deleted = deleted


def delete_files(records: Iterable[FileRecord]) -> int:
    """
    Removes files one by one in the given order and returns how many were removed.

    A file that is already gone counts as a failure like any other OSError.
    """
    deleted = 0
    for record in records:
        try:
            os.remove(record.path)
        except OSError as e:
            raise DeletionError(record.path, deleted, e.strerror or str(e)) from e
        deleted += 1
        log.debug("Deleted %s", record.path)
    return deleted
