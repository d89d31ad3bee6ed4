"""Source tree scanning and candidate pre-filtering."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Set, Tuple

from .cancellation import CancelToken
from .filesystem import FileSystem
from .models import FileKind, base_name_key, classify, file_extension
from .utils import get_relative_path, log_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    """Candidates that survived pre-filtering, plus what was dropped."""
    candidates: Tuple[Path, ...] = ()
    raw_found: int = 0
    jpeg_found: int = 0
    skipped_jpegs: int = 0
    skipped_raws_dupl: int = 0
    skipped_jpegs_dupl: int = 0


class Scanner:
    """Walks a source tree once and selects the files worth reading metadata for."""

    def __init__(self, filesystem: FileSystem, allow_override: bool = False):
        """
        Initialize scanner.

        Args:
            filesystem: Filesystem capability used for walking and existence checks
            allow_override: Keep candidates whose target already exists
        """
        self.filesystem = filesystem
        self.allow_override = allow_override

    def scan(self, source_dir: Path, target_dir: Path,
             cancel_token: Optional[CancelToken] = None) -> ScanResult:
        """
        Scan source_dir for RAW and JPEG candidates.

        JPEGs with a RAW sibling of the same base name are dropped. When
        overrides are not allowed, files whose target already exists are
        dropped too. Walk errors propagate and no result is produced.
        """
        source_dir = Path(source_dir)
        target_dir = Path(target_dir)

        with log_duration("Scanning source directory", logger):
            raw_paths, jpeg_paths, raw_base_names = self._walk(source_dir, cancel_token)

            candidates: List[Path] = []
            skipped_jpegs = 0
            skipped_raws_dupl = 0
            skipped_jpegs_dupl = 0

            for path in raw_paths:
                if self._should_include(path, source_dir, target_dir):
                    candidates.append(path)
                else:
                    skipped_raws_dupl += 1

            for path in jpeg_paths:
                if base_name_key(path.name) in raw_base_names:
                    skipped_jpegs += 1
                    continue
                if self._should_include(path, source_dir, target_dir):
                    candidates.append(path)
                else:
                    skipped_jpegs_dupl += 1

        logger.debug(
            f"Processing {len(candidates)} files after filtering "
            f"({skipped_jpegs} JPEGs skipped for RAW, "
            f"{skipped_raws_dupl} RAWs and {skipped_jpegs_dupl} JPEGs skipped as duplicates)"
        )

        return ScanResult(
            candidates=tuple(candidates),
            raw_found=len(raw_paths),
            jpeg_found=len(jpeg_paths),
            skipped_jpegs=skipped_jpegs,
            skipped_raws_dupl=skipped_raws_dupl,
            skipped_jpegs_dupl=skipped_jpegs_dupl,
        )

    def _walk(self, source_dir: Path, cancel_token: Optional[CancelToken]
              ) -> Tuple[List[Path], List[Path], Set[str]]:
        """Separate RAW and JPEG paths and collect RAW base names."""
        raw_paths: List[Path] = []
        jpeg_paths: List[Path] = []
        raw_base_names: Set[str] = set()

        for path, is_dir in self.filesystem.walk(source_dir):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(op="scan", path=str(source_dir))
            if is_dir:
                continue

            path = Path(path)
            kind = classify(file_extension(path.name))
            if kind is FileKind.RAW:
                raw_paths.append(path)
                raw_base_names.add(base_name_key(path.name))
            elif kind is FileKind.JPEG:
                jpeg_paths.append(path)

        return raw_paths, jpeg_paths, raw_base_names

    def _should_include(self, source_path: Path, source_dir: Path, target_dir: Path) -> bool:
        if self.allow_override:
            return True
        target_path = target_dir / get_relative_path(source_path, source_dir)
        return not self.filesystem.exists(target_path)
