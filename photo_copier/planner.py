"""Copy planning: scan, resolve capture times, build the plan."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .cancellation import CancelToken
from .errors import ConfigurationError
from .filesystem import FileSystem
from .metadata import MetadataReader
from .metadata_pool import MetadataWorkerPool, PoolResult, ScanProgressCallback
from .models import CopyItem, CopyPlan, FileRecord
from .scanner import Scanner, ScanResult
from .utils import log_duration

logger = logging.getLogger(__name__)


def sort_records(records: Iterable[FileRecord]) -> List[FileRecord]:
    """Order records by capture time, then by name."""
    return sorted(records, key=lambda r: (r.captured_at, r.name))


def derive_range(items: Sequence[CopyItem], start_date: Optional[datetime],
                 end_date: Optional[datetime]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Effective date range of a plan.

    Explicit bounds win, even when only one side was given. Otherwise the
    range spans the capture times of the items, or is open when there are none.
    """
    if start_date is not None or end_date is not None:
        return start_date, end_date
    if not items:
        return None, None
    captured = [item.record.captured_at for item in items]
    return min(captured), max(captured)


def build_plan(records: Iterable[FileRecord], target_dir: Path, filesystem: FileSystem,
               allow_override: bool = False,
               start_date: Optional[datetime] = None,
               end_date: Optional[datetime] = None,
               scan: Optional[ScanResult] = None,
               pool: Optional[PoolResult] = None) -> CopyPlan:
    """
    Build the immutable copy plan from resolved records.

    Override detection only runs when overrides are allowed; otherwise
    existing targets were already dropped by the scanner.
    """
    target_dir = Path(target_dir)
    scan = scan or ScanResult()
    pool = pool or PoolResult()

    items: List[CopyItem] = []
    raw_count = 0
    jpeg_count = 0
    for record in sort_records(records):
        items.append(CopyItem(record=record, target_path=target_dir / record.relative_path))
        if record.is_raw:
            raw_count += 1
        elif record.is_jpeg:
            jpeg_count += 1

    overrides: List[CopyItem] = []
    raw_overrides = 0
    jpeg_overrides = 0
    if allow_override:
        for item in items:
            if not filesystem.exists(item.target_path):
                continue
            overrides.append(item)
            if item.record.is_raw:
                raw_overrides += 1
            elif item.record.is_jpeg:
                jpeg_overrides += 1

    range_start, range_end = derive_range(items, start_date, end_date)

    logger.debug(
        f"Planned {len(items)} items ({raw_count} RAW, {jpeg_count} JPEG), "
        f"{scan.skipped_jpegs} JPEGs skipped, "
        f"{pool.skipped_raws_date} RAWs skipped (date), "
        f"{scan.skipped_raws_dupl} RAWs skipped (dupl), "
        f"{raw_overrides + jpeg_overrides} overrides"
    )

    return CopyPlan(
        items=tuple(items),
        override_items=tuple(overrides),
        raw_count=raw_count,
        jpeg_count=jpeg_count,
        skipped_jpegs=scan.skipped_jpegs,
        skipped_raws_date=pool.skipped_raws_date,
        skipped_jpegs_date=pool.skipped_jpegs_date,
        skipped_raws_dupl=scan.skipped_raws_dupl,
        skipped_jpegs_dupl=scan.skipped_jpegs_dupl,
        raw_overrides=raw_overrides,
        jpeg_overrides=jpeg_overrides,
        range_start=range_start,
        range_end=range_end,
        warnings=tuple(sorted(pool.warnings)),
    )


class Planner:
    """Turns a source and target directory into a CopyPlan."""

    def __init__(self, filesystem: Optional[FileSystem], reader: Optional[MetadataReader],
                 workers: Optional[int] = None, allow_override: bool = False,
                 on_progress: Optional[ScanProgressCallback] = None):
        self.filesystem = filesystem
        self.reader = reader
        self.workers = workers
        self.allow_override = allow_override
        self.on_progress = on_progress

    def plan(self, source_dir: Path, target_dir: Path,
             start_date: Optional[datetime] = None,
             end_date: Optional[datetime] = None,
             cancel_token: Optional[CancelToken] = None) -> CopyPlan:
        """
        Plan a copy from source_dir to target_dir.

        Nothing is written to the target tree. Any traversal, stat or
        cancellation error aborts planning and no plan is returned.
        """
        if self.filesystem is None or self.reader is None:
            raise ConfigurationError("planner requires a filesystem and a metadata reader",
                                     op="plan")

        token = cancel_token or CancelToken()
        token.raise_if_cancelled(op="plan", path=str(source_dir))

        with log_duration("Planning copy", logger):
            scanner = Scanner(self.filesystem, allow_override=self.allow_override)
            scan = scanner.scan(source_dir, target_dir, token)
            logger.info(f"Found {scan.raw_found} RAW and {scan.jpeg_found} JPEG files "
                        f"in {source_dir}")

            pool = MetadataWorkerPool(self.filesystem, self.reader,
                                      workers=self.workers, on_progress=self.on_progress)
            resolved = pool.resolve(scan.candidates, source_dir, start_date, end_date, token)
            logger.debug(f"Collected {len(resolved.records)} candidate files "
                         f"({len(resolved.warnings)} warnings)")

            return build_plan(
                resolved.records,
                target_dir,
                self.filesystem,
                allow_override=self.allow_override,
                start_date=start_date,
                end_date=end_date,
                scan=scan,
                pool=resolved,
            )
