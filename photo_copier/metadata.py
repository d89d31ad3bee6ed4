"""Capture time extraction from photo metadata."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

import exifread

from .cancellation import CancelToken
from .errors import MetadataUnavailable

logger = logging.getLogger(__name__)

EXIF_DATE_FORMAT = '%Y:%m:%d %H:%M:%S'

# Checked in order; the first tag holding a parseable date wins.
DATE_TAGS = ('EXIF DateTimeOriginal', 'EXIF DateTimeDigitized', 'Image DateTime')


class MetadataReader(Protocol):
    """Reads the capture time of a single file."""

    def capture_time(self, path: Path, cancel_token: Optional[CancelToken] = None) -> datetime:
        """Return the capture time or raise.

        OperationCancelled signals cancellation; any other exception means
        the metadata is unavailable.
        """
        ...


def parse_exif_datetime(value: str) -> Optional[datetime]:
    """Parse an EXIF date string like '2020:07:28 11:49:03'."""
    value = value.strip().rstrip('\x00')
    try:
        return datetime.strptime(value[:19], EXIF_DATE_FORMAT)
    except ValueError:
        return None


class ExifReader:
    """MetadataReader backed by exifread. Stateless, so safe to share between workers."""

    def capture_time(self, path: Path, cancel_token: Optional[CancelToken] = None) -> datetime:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(op="read metadata", path=str(path))

        try:
            with open(path, 'rb') as f:
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            # exifread raises a variety of parser errors on damaged files
            raise MetadataUnavailable(f"could not read EXIF: {e}", op="read metadata",
                                      path=str(path)) from e

        for tag_name in DATE_TAGS:
            tag = tags.get(tag_name)
            if tag is None:
                continue
            parsed = parse_exif_datetime(str(tag))
            if parsed is not None:
                return parsed
            logger.debug(f"Unparseable {tag_name} in {path}: {tag}")

        raise MetadataUnavailable("exif datetime not found", op="read metadata", path=str(path))
