"""Concurrent enumeration of a sharded blob tree."""
from __future__ import annotations
import logging
import os
import queue
import stat
import threading
import time
from datetime import timedelta
from typing import Optional

from blob_cleaner.scan.records import FileRecord, ScanStats
from blob_cleaner.units import BYTES_PER_GB, BYTES_PER_MB

log = logging.getLogger("blob_cleaner")


class ScanError(Exception):
    """The blob root itself could not be listed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"readdir {path}: {reason}")
        self.path = path


def default_workers() -> int:
    return max(1, (os.cpu_count() or 2) - 1)


class _Progress:
    """Shared counters; only the increments are serialized."""

    def __init__(self, every: int, expected_bytes: int):
        self.every = max(1, int(every))
        self.expected_bytes = max(0, int(expected_bytes))
        self.files = 0
        self.bytes = 0
        self.failed_files = 0
        self.failed_dirs = 0
        self.started = time.monotonic()
        self._lock = threading.Lock()

    def add_file(self, size: int) -> None:
        with self._lock:
            self.files += 1
            self.bytes += size
            n, done = self.files, self.bytes
        if n % self.every == 0:
            self._report(n, done)

    def add_failure(self, is_dir: bool = False) -> None:
        with self._lock:
            if is_dir:
                self.failed_dirs += 1
            else:
                self.failed_files += 1

    def _report(self, n: int, done: int) -> None:
        log.info("checked %d blobs", n)
        elapsed = time.monotonic() - self.started
        speed = (done / BYTES_PER_MB) / elapsed if elapsed > 0 else 0.0
        if speed > 0 and self.expected_bytes:
            remaining_mb = max(0, self.expected_bytes - done) / BYTES_PER_MB
            eta = str(timedelta(seconds=int(remaining_mb / speed)))
        else:
            eta = "unknown"
        log.info("%.2f GB checked (speed: %.2f MB/s) ETA: %s", done / BYTES_PER_GB, speed, eta)

    def snapshot(self) -> ScanStats:
        with self._lock:
            return ScanStats(
                files=self.files,
                bytes=self.bytes,
                failed_files=self.failed_files,
                failed_dirs=self.failed_dirs,
                elapsed_sec=time.monotonic() - self.started,
            )


class TreeScanner:
    """
    Walks root/<shard>/... and returns one FileRecord per regular file.

    Each immediate subdirectory of the root is one task for a fixed pool of
    worker threads fed through a bounded queue, so the controlling thread
    blocks while every worker is busy and the queue is full. Workers collect
    records into their own lists, which are concatenated once the pool has
    drained.

    Per-file and per-directory errors are logged and skipped; only a failure
    to list the root itself raises ScanError.
    """

    def __init__(self, workers: int = 0, progress_every: int = 100, expected_bytes: int = 0):
        self.workers = int(workers) if workers and workers > 0 else default_workers()
        self.progress_every = progress_every
        self.expected_bytes = expected_bytes
        self.stats = ScanStats()

    def scan(self, root: str | os.PathLike) -> list[FileRecord]:
        root = os.path.abspath(os.fspath(root))
        try:
            with os.scandir(root) as it:
                entries = list(it)
        except OSError as e:
            raise ScanError(root, e.strerror or str(e)) from e

        progress = _Progress(self.progress_every, self.expected_bytes)
        tasks: queue.Queue[Optional[str]] = queue.Queue(maxsize=self.workers)
        buckets: list[list[FileRecord]] = [[] for _ in range(self.workers)]
        threads = [
            threading.Thread(
                target=self._worker,
                args=(tasks, buckets[i], progress),
                daemon=True,
                name=f"scan-worker-{i}",
            )
            for i in range(self.workers)
        ]
        for t in threads:
            t.start()

        top_level: list[FileRecord] = []
        shards = 0
        try:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    tasks.put(entry.path)
                    shards += 1
                elif entry.is_file(follow_symlinks=False):
                    record = self._stat_file(entry.path, progress)
                    if record is not None:
                        top_level.append(record)
        finally:
            for _ in threads:
                tasks.put(None)
            for t in threads:
                t.join()

        records = top_level
        for bucket in buckets:
            records.extend(bucket)

        self.stats = progress.snapshot()
        log.info(
            "scan finished: %d blobs in %d shards (%.2f GB, %d unreadable files, %d unreadable dirs) in %.1fs",
            self.stats.files, shards, self.stats.bytes / BYTES_PER_GB,
            self.stats.failed_files, self.stats.failed_dirs, self.stats.elapsed_sec,
        )
        return records

    def _worker(self, tasks: queue.Queue, out: list[FileRecord], progress: _Progress) -> None:
        while True:
            shard = tasks.get()
            try:
                if shard is None:
                    return
                self._walk(shard, out, progress)
            except Exception:
                # Keep draining the queue: the controller would otherwise block forever.
                log.exception("Unexpected error while scanning shard %s", shard)
            finally:
                tasks.task_done()

    def _walk(self, shard: str, out: list[FileRecord], progress: _Progress) -> None:
        pending = [shard]
        while pending:
            current = pending.pop()
            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                progress.add_failure(is_dir=True)
                log.error("Failed to walk %s: %s", current, e)
                continue

            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    pending.append(entry.path)
                elif entry.is_file(follow_symlinks=False):
                    record = self._stat_file(entry.path, progress)
                    if record is not None:
                        out.append(record)

    @staticmethod
    def _stat_file(path: str, progress: _Progress) -> FileRecord | None:
        try:
            st = os.lstat(path)
        except OSError as e:
            progress.add_failure()
            log.warning("Skipping %s: stat failed: %s", path, e)
            return None
        if not stat.S_ISREG(st.st_mode):
            return None
        progress.add_file(st.st_size)
        return FileRecord(path=path, atime=st.st_atime, size=st.st_size)
