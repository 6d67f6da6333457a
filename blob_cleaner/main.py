from __future__ import annotations
import argparse
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from blob_cleaner.cleaner import run_cleanup
from blob_cleaner.disk.usage import ProbeError
from blob_cleaner.evict.deleter import DeletionError
from blob_cleaner.scan.scanner import ScanError
from blob_cleaner.settings import Settings

log = logging.getLogger("blob_cleaner")


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration: {e}") from e


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="blob-cleaner",
        description=(
            "Delete the least recently accessed blobs when the disk holding "
            "the blob directory is fuller than DISK_THRESHOLD (default 0.90)."
        ),
    )
    parser.add_argument("blobs_dir", help="Path of the blobs directory")
    args = parser.parse_args(list(argv) if argv is not None else None)

    settings = load_settings()
    root = Path(args.blobs_dir).resolve()
    if not root.is_dir():
        raise SystemExit(f"Directory doesn't exist: {root}")

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        run_cleanup(root, settings)
    except (ProbeError, ScanError, DeletionError) as e:
        log.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
