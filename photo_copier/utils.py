"""Utility functions for photo copying."""

import hashlib
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import psutil

logger = logging.getLogger(__name__)


def calculate_sha256(file_path: Path, chunk_size: int = 8192) -> str:
    """
    Calculate SHA256 hash of a file.

    Args:
        file_path: Path to file
        chunk_size: Size of chunks to read at a time

    Returns:
        SHA256 hash as hexadecimal string

    Raises:
        OSError: If the file cannot be read
    """
    hasher = hashlib.sha256()
    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


def get_file_size(file_path: Path) -> int:
    """
    Get file size in bytes.

    Args:
        file_path: Path to file

    Returns:
        File size in bytes, 0 if error
    """
    try:
        return Path(file_path).stat().st_size
    except OSError as e:
        logger.error(f"Failed to get size for {file_path}: {e}")
        return 0


def format_bytes(bytes_value: int) -> str:
    """
    Format bytes as human-readable string.

    Args:
        bytes_value: Size in bytes

    Returns:
        Formatted string like "1.2GB"
    """
    if bytes_value == 0:
        return "0B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.1f}{units[unit_index]}"


def get_available_space(path: Path) -> int:
    """
    Get available disk space for a path in bytes.

    The nearest existing ancestor is measured, so a target directory that
    has not been created yet can still be checked.
    """
    path = Path(path)
    while not path.exists() and path != path.parent:
        path = path.parent
    try:
        return psutil.disk_usage(str(path)).free
    except OSError as e:
        logger.error(f"Failed to get disk space for {path}: {e}")
        return 0


def get_relative_path(file_path: Path, base_path: Path) -> Path:
    """
    Get relative path from base path.

    Args:
        file_path: Full file path
        base_path: Base path to make relative to

    Returns:
        Relative path, or just the file name when the paths share no base
    """
    try:
        return Path(file_path).relative_to(base_path)
    except ValueError:
        return Path(Path(file_path).name)


@contextmanager
def log_duration(label: str, log: logging.Logger = logger) -> Iterator[None]:
    """Log how long the wrapped block took, at DEBUG level."""
    start = time.monotonic()
    try:
        yield
    finally:
        log.debug(f"{label} took {time.monotonic() - start:.3f}s")
