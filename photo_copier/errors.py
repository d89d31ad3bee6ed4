"""Error types for photo copying."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Broad error categories used for user-facing messages."""
    INVALID_CONFIG = "invalid_config"
    NOT_FOUND = "not_found"
    METADATA = "metadata"
    IO_FAILURE = "io_failure"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class PhotoCopierError(Exception):
    """Base error carrying the failed operation and the path involved."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, op: str = "", path: str = "",
                 kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        self.op = op
        self.path = str(path) if path else ""
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        parts = [p for p in (self.op, self.path) if p]
        if parts:
            return f"{': '.join(parts)}: {self.message}"
        return self.message


class ConfigurationError(PhotoCopierError):
    """Caller supplied an unusable configuration or capability."""
    kind = ErrorKind.INVALID_CONFIG


class MetadataUnavailable(PhotoCopierError):
    """Capture time could not be read from a file."""
    kind = ErrorKind.METADATA


class OperationCancelled(PhotoCopierError):
    """The shared cancel token was set while an operation was running."""
    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "operation cancelled", op: str = "", path: str = ""):
        super().__init__(message, op=op, path=path)


class CopyVerificationError(PhotoCopierError):
    """Copied file does not match its source."""
    kind = ErrorKind.IO_FAILURE


def wrap(kind: ErrorKind, op: str, path: str, err: BaseException) -> PhotoCopierError:
    """Attach an operation and path to a raw exception.

    PhotoCopierError instances that already carry a kind other than INTERNAL
    are returned unchanged, so cancellation and configuration errors keep
    their meaning when wrapped at the CLI boundary.
    """
    if isinstance(err, PhotoCopierError) and err.kind != ErrorKind.INTERNAL:
        return err
    if isinstance(err, FileNotFoundError):
        kind = ErrorKind.NOT_FOUND
        path = err.filename or path
    elif isinstance(err, OSError):
        if kind == ErrorKind.INTERNAL:
            kind = ErrorKind.IO_FAILURE
        path = err.filename or path
    message = err.strerror if isinstance(err, OSError) and err.strerror else str(err)
    wrapped = PhotoCopierError(message, op=op, path=path, kind=kind)
    wrapped.__cause__ = err
    return wrapped


def user_message(err: BaseException) -> str:
    """One-line message shown to the user for a fatal error."""
    if not isinstance(err, PhotoCopierError):
        return str(err)

    if err.kind == ErrorKind.INVALID_CONFIG:
        return f"Invalid configuration: {err.message}"
    if err.kind == ErrorKind.NOT_FOUND:
        return f"Path not found: {err.path}"
    if err.kind == ErrorKind.METADATA:
        return f"EXIF read failed: {err.path}"
    if err.kind == ErrorKind.IO_FAILURE:
        detail = f" ({err.message})" if err.message else ""
        return f"I/O error during {err.op or 'operation'}: {err.path}{detail}"
    if err.kind == ErrorKind.CANCELLED:
        return "Cancelled"
    return f"Unexpected error: {err}"
