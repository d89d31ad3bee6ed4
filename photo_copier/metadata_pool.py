"""Bounded worker pool resolving capture times for scan candidates."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .cancellation import CancelToken
from .errors import OperationCancelled
from .filesystem import FileSystem
from .metadata import MetadataReader
from .models import FileKind, FileRecord, classify, file_extension
from .utils import get_relative_path, log_duration

logger = logging.getLogger(__name__)

ScanProgressCallback = Callable[[int, int], None]


def default_worker_count() -> int:
    """Number of metadata workers to use when none is configured."""
    return max(1, os.cpu_count() or 1)


@dataclass(frozen=True)
class PoolResult:
    """Resolved records (in completion order) and date-filter counters."""
    records: Tuple[FileRecord, ...] = ()
    warnings: Tuple[str, ...] = ()
    skipped_raws_date: int = 0
    skipped_jpegs_date: int = 0


@dataclass(frozen=True)
class _Outcome:
    kind: FileKind
    record: Optional[FileRecord] = None
    warning: str = ""

    @property
    def skipped(self) -> bool:
        return self.record is None


class MetadataWorkerPool:
    """Resolves a capture time for every candidate with a fixed number of threads."""

    def __init__(self, filesystem: FileSystem, reader: MetadataReader,
                 workers: Optional[int] = None,
                 on_progress: Optional[ScanProgressCallback] = None):
        """
        Initialize worker pool.

        Args:
            filesystem: Used to stat candidates
            reader: Metadata reader shared by all workers
            workers: Thread count, defaults to the host CPU count
            on_progress: Called with (resolved, total) once per candidate
        """
        self.filesystem = filesystem
        self.reader = reader
        self.workers = max(1, workers or default_worker_count())
        self.on_progress = on_progress

    def resolve(self, candidates: Sequence[Path], source_dir: Path,
                start_date: Optional[datetime] = None,
                end_date: Optional[datetime] = None,
                cancel_token: Optional[CancelToken] = None) -> PoolResult:
        """
        Resolve capture times and apply the date filter.

        Exactly one outcome is collected per candidate. The first fatal error
        (stat failure or cancellation) cancels pending work and propagates;
        everything resolved so far is discarded.
        """
        token = cancel_token or CancelToken()
        token.raise_if_cancelled(op="read metadata", path=str(source_dir))

        total = len(candidates)
        if total == 0:
            return PoolResult()

        source_dir = Path(source_dir)
        workers = min(self.workers, total)
        logger.debug(f"Using {workers} EXIF workers for {total} files")

        records: List[FileRecord] = []
        warnings: List[str] = []
        skipped_raws_date = 0
        skipped_jpegs_date = 0

        with log_duration("Reading capture times", logger):
            with ThreadPoolExecutor(max_workers=workers) as executor:
                future_to_path = {
                    executor.submit(self._resolve_one, Path(path), source_dir,
                                    start_date, end_date, token): path
                    for path in candidates
                }
                try:
                    for resolved, future in enumerate(as_completed(future_to_path), 1):
                        outcome = future.result()
                        token.raise_if_cancelled(op="read metadata",
                                                 path=str(future_to_path[future]))

                        if outcome.skipped:
                            if outcome.kind is FileKind.RAW:
                                skipped_raws_date += 1
                            else:
                                skipped_jpegs_date += 1
                        else:
                            records.append(outcome.record)
                            if outcome.warning:
                                warnings.append(outcome.warning)

                        if self.on_progress:
                            self.on_progress(resolved, total)
                except BaseException:
                    for future in future_to_path:
                        future.cancel()
                    raise

        return PoolResult(
            records=tuple(records),
            warnings=tuple(warnings),
            skipped_raws_date=skipped_raws_date,
            skipped_jpegs_date=skipped_jpegs_date,
        )

    def _resolve_one(self, path: Path, source_dir: Path,
                     start_date: Optional[datetime], end_date: Optional[datetime],
                     token: CancelToken) -> _Outcome:
        token.raise_if_cancelled(op="read metadata", path=str(path))

        modified_at = self.filesystem.stat(path)
        kind = classify(file_extension(path.name))

        # Capture time is taken to never exceed modification time, so a file
        # modified before the start date cannot have been captured after it.
        if start_date is not None and modified_at < start_date:
            return _Outcome(kind=kind)

        warning = ""
        try:
            captured_at = self.reader.capture_time(path, token)
        except OperationCancelled:
            raise
        except Exception as e:
            logger.debug(f"No capture time for {path}: {e}")
            captured_at = modified_at
            warning = f"EXIF not found for {path.name}, using filesystem time"

        if start_date is not None and captured_at < start_date:
            return _Outcome(kind=kind)
        if end_date is not None and captured_at > end_date:
            return _Outcome(kind=kind)

        relative = get_relative_path(path, source_dir)
        return _Outcome(
            kind=kind,
            record=FileRecord.from_path(path, relative, captured_at),
            warning=warning,
        )
