"""One eviction run: probe, scan, rank, select, delete, re-probe."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional

from blob_cleaner.disk.usage import UsageSnapshot, probe_usage
from blob_cleaner.evict.deleter import delete_files
from blob_cleaner.evict.ranker import rank_candidates
from blob_cleaner.evict.selector import SelectionPolicy, build_policy
from blob_cleaner.scan.scanner import TreeScanner
from blob_cleaner.settings import Settings
from blob_cleaner.units import BYTES_PER_MB

log = logging.getLogger("blob_cleaner")


@dataclass
class CleanupReport:
    before: UsageSnapshot
    triggered: bool = False
    scanned: int = 0
    selected: int = 0
    deleted: int = 0
    bytes_freed: int = 0  # measured sizes of deleted files, not a usage delta
    after: Optional[UsageSnapshot] = None


def run_cleanup(root: str | os.PathLike, settings: Settings, policy: SelectionPolicy | None = None) -> CleanupReport:
    root = os.path.abspath(os.fspath(root))
    before = probe_usage(root)
    report = CleanupReport(before=before)
    log.info("disk usage: %.2f%%", before.fill_ratio * 100)

    if before.fill_ratio <= settings.disk_threshold:
        return report

    report.triggered = True
    log.info("over %.2f%%, cleaning up", settings.disk_threshold * 100)

    scanner = TreeScanner(
        workers=settings.scan_workers,
        progress_every=settings.progress_every,
        expected_bytes=before.used_bytes,
    )
    records = scanner.scan(root)
    report.scanned = len(records)

    ranked = rank_candidates(records)
    plan = (policy or build_policy(settings)).select(before, ranked)
    report.selected = len(plan.candidates)
    log.info(
        "selected %d of %d blobs for eviction (policy=%s, ~%.2f MB)",
        report.selected, report.scanned, plan.policy, plan.estimated_bytes / BYTES_PER_MB,
    )

    report.deleted = delete_files(plan.candidates)
    report.bytes_freed = plan.estimated_bytes

    report.after = probe_usage(root)
    log.info("disk usage: %.2f%%", report.after.fill_ratio * 100)
    log.info("Done cleaning up")
    return report
