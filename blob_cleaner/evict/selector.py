"""Eviction policies: how many of the oldest blobs to delete."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Sequence

from blob_cleaner.disk.usage import UsageSnapshot
from blob_cleaner.scan.records import FileRecord
from blob_cleaner.settings import Settings
from blob_cleaner.units import BYTES_PER_MB

log = logging.getLogger("blob_cleaner")


@dataclass(frozen=True)
class EvictionPlan:
    policy: str
    target_bytes_to_free: float | None
    candidates: list[FileRecord] = field(default_factory=list)

    @property
    def estimated_bytes(self) -> int:
        return sum(r.size for r in self.candidates)


class SelectionPolicy:
    name = "base"

    def count(self, snapshot: UsageSnapshot, available: int) -> int:
        raise NotImplementedError

    def target_bytes(self, snapshot: UsageSnapshot) -> float | None:
        return None

    def select(self, snapshot: UsageSnapshot, ranked: Sequence[FileRecord]) -> EvictionPlan:
        """Takes the leading (oldest) part of an already ranked sequence."""
        k = max(0, min(self.count(snapshot, len(ranked)), len(ranked)))
        return EvictionPlan(
            policy=self.name,
            target_bytes_to_free=self.target_bytes(snapshot),
            candidates=list(ranked[:k]),
        )


class ThresholdPolicy(SelectionPolicy):
    """
    Reclaim a fraction of the currently used bytes.

    Blob sizes are not consulted: the byte target is turned into a blob count
    with an assumed average blob size given in megabytes.
    """

    name = "threshold"

    def __init__(self, reclaim_fraction: float = 0.1, avg_blob_size_mb: float = 2.0):
        if avg_blob_size_mb <= 0:
            raise ValueError("avg_blob_size_mb must be positive")
        self.reclaim_fraction = float(reclaim_fraction)
        self.avg_blob_size_mb = float(avg_blob_size_mb)

    @property
    def avg_blob_size_bytes(self) -> float:
        return self.avg_blob_size_mb * BYTES_PER_MB

    def target_bytes(self, snapshot: UsageSnapshot) -> float:
        return snapshot.used_bytes * self.reclaim_fraction

    def count(self, snapshot: UsageSnapshot, available: int) -> int:
        to_free = self.target_bytes(snapshot)
        blobs = int(to_free // self.avg_blob_size_bytes)
        log.info("space to free up: %.2f MB - %d blobs", to_free / BYTES_PER_MB, blobs)
        return min(blobs, available)


class FixedCountPolicy(SelectionPolicy):
    name = "fixed"

    def __init__(self, limit: int = 5000):
        self.limit = max(0, int(limit))

    def count(self, snapshot: UsageSnapshot, available: int) -> int:
        return min(self.limit, available)


def build_policy(settings: Settings) -> SelectionPolicy:
    if settings.selection_policy == "fixed":
        return FixedCountPolicy(settings.fixed_evict_count)
    if settings.selection_policy == "threshold":
        return ThresholdPolicy(settings.reclaim_fraction, settings.avg_blob_size_mb)
    raise ValueError(f"Unknown selection policy: {settings.selection_policy}")
