"""File classification and the plan data model."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


RAW_EXTENSIONS = frozenset({'.arw', '.cr2', '.cr3', '.nef', '.raf', '.rw2', '.orf', '.dng'})
JPEG_EXTENSIONS = frozenset({'.jpg', '.jpeg'})


class FileKind(str, Enum):
    """Classification of a candidate file."""
    RAW = "raw"
    JPEG = "jpeg"
    OTHER = "other"


def _normalize_extension(extension: str) -> str:
    extension = extension.lower()
    if extension and not extension.startswith('.'):
        extension = '.' + extension
    return extension


def classify(extension: str) -> FileKind:
    """
    Classify a file extension.

    Args:
        extension: Extension with or without the leading dot, any case

    Returns:
        FileKind.RAW, FileKind.JPEG or FileKind.OTHER
    """
    extension = _normalize_extension(extension)
    if extension in RAW_EXTENSIONS:
        return FileKind.RAW
    if extension in JPEG_EXTENSIONS:
        return FileKind.JPEG
    return FileKind.OTHER


def file_extension(name: str) -> str:
    """
    Extension of a file name including the dot, as written.

    Everything from the last dot counts, so a file named ".ARW" has the
    extension ".ARW" (pathlib treats it as a hidden file without a suffix).
    """
    index = name.rfind('.')
    return name[index:] if index >= 0 else ''


def base_name_key(name: str) -> str:
    """Lower-cased file name without its extension, used to pair RAW and JPEG files."""
    return name[:len(name) - len(file_extension(name))].lower()


@dataclass(frozen=True)
class FileRecord:
    """A candidate file with its resolved capture time."""
    source_path: Path
    relative_path: Path
    name: str
    base_name: str
    extension: str
    captured_at: datetime
    kind: FileKind

    @classmethod
    def from_path(cls, source_path, relative_path, captured_at: datetime) -> 'FileRecord':
        source_path = Path(source_path)
        name = source_path.name
        extension = file_extension(name).lower()
        return cls(
            source_path=source_path,
            relative_path=Path(relative_path),
            name=name,
            base_name=base_name_key(name),
            extension=extension,
            captured_at=captured_at,
            kind=classify(extension),
        )

    @property
    def is_raw(self) -> bool:
        return self.kind is FileKind.RAW

    @property
    def is_jpeg(self) -> bool:
        return self.kind is FileKind.JPEG


@dataclass(frozen=True)
class CopyItem:
    """A file record paired with the path it will be copied to."""
    record: FileRecord
    target_path: Path

    @property
    def name(self) -> str:
        return self.record.name


@dataclass(frozen=True)
class CopyPlan:
    """Finished description of what will be copied, skipped and confirmed."""
    items: Tuple[CopyItem, ...] = ()
    override_items: Tuple[CopyItem, ...] = ()
    raw_count: int = 0
    jpeg_count: int = 0
    skipped_jpegs: int = 0
    skipped_raws_date: int = 0
    skipped_jpegs_date: int = 0
    skipped_raws_dupl: int = 0
    skipped_jpegs_dupl: int = 0
    raw_overrides: int = 0
    jpeg_overrides: int = 0
    range_start: Optional[datetime] = None
    range_end: Optional[datetime] = None
    warnings: Tuple[str, ...] = ()

    @property
    def override_count(self) -> int:
        return self.raw_overrides + self.jpeg_overrides

    @property
    def is_empty(self) -> bool:
        return not self.items
