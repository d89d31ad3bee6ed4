"""Filesystem capability used by the planner and executor."""

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterator, Protocol, Tuple

from .errors import CopyVerificationError
from .utils import calculate_sha256

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """Filesystem operations the pipeline depends on.

    Implementations may be called from several worker threads at once and
    must be safe for concurrent use.
    """

    def walk(self, root: Path) -> Iterator[Tuple[Path, bool]]:
        """Yield (path, is_dir) for every entry below root."""
        ...

    def stat(self, path: Path) -> datetime:
        """Return the modification time; raise FileNotFoundError if absent."""
        ...

    def exists(self, path: Path) -> bool:
        ...

    def ensure_dir(self, path: Path) -> None:
        ...

    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy source to destination, creating missing parent directories."""
        ...


def _raise_walk_error(error: OSError) -> None:
    raise error


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    PARTIAL_SUFFIX = '.partial'

    def __init__(self, verify_copies: bool = False):
        """
        Initialize local filesystem access.

        Args:
            verify_copies: Compare SHA256 of source and copy after each copy
        """
        self.verify_copies = verify_copies

    def walk(self, root: Path) -> Iterator[Tuple[Path, bool]]:
        """Walk root recursively in sorted order. Any walk error propagates."""
        for dirpath, dirnames, filenames in os.walk(str(root), onerror=_raise_walk_error):
            dirnames.sort()
            base = Path(dirpath)
            for dirname in dirnames:
                yield base / dirname, True
            for filename in sorted(filenames):
                yield base / filename, False

    def stat(self, path: Path) -> datetime:
        return datetime.fromtimestamp(Path(path).stat().st_mtime)

    def exists(self, path: Path) -> bool:
        try:
            Path(path).stat()
        except FileNotFoundError:
            return False
        return True

    def ensure_dir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def copy_file(self, source: Path, destination: Path) -> None:
        """
        Copy a file without ever leaving a partial destination behind.

        The data is written to a temporary sibling first and renamed into
        place once complete, so an interrupted copy leaves any existing
        destination untouched.
        """
        source = Path(source)
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        partial = destination.with_name(f".{destination.name}{self.PARTIAL_SUFFIX}")
        try:
            shutil.copy2(source, partial)
            if self.verify_copies:
                source_hash = calculate_sha256(source)
                copy_hash = calculate_sha256(partial)
                if source_hash != copy_hash:
                    raise CopyVerificationError(
                        "hash verification failed", op="copy", path=str(source)
                    )
            os.replace(partial, destination)
        except BaseException:
            if partial.exists():
                partial.unlink()
            raise

        logger.debug(f"Copied {source} -> {destination}")
