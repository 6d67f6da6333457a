from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Literal

PolicyName = Literal["threshold", "fixed"]

class Settings(BaseSettings):
    disk_threshold: float = Field(0.90, ge=0.0, le=1.0)  # fill ratio above which cleanup runs

    selection_policy: PolicyName = "threshold"
    reclaim_fraction: float = Field(0.1, gt=0.0, le=1.0)  # share of used bytes to reclaim
    avg_blob_size_mb: float = Field(2.0, gt=0.0)  # blob sizes are assumed, not measured
    fixed_evict_count: int = Field(5000, ge=0)

    scan_workers: int = Field(0, ge=0)  # 0 = cpu_count - 1
    progress_every: int = Field(100, ge=1)

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_ignore_empty = True
        extra = "ignore"
