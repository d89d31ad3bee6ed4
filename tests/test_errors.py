"""Tests for error wrapping, user messages and cancellation."""

import threading

import pytest

from photo_copier.cancellation import CancelToken
from photo_copier.errors import (
    ConfigurationError,
    ErrorKind,
    MetadataUnavailable,
    OperationCancelled,
    PhotoCopierError,
    user_message,
    wrap,
)


class TestWrap:
    """Attaching operation and path to raw exceptions."""

    def test_missing_file_becomes_not_found(self):
        err = FileNotFoundError(2, 'No such file or directory', '/source/a.jpg')
        wrapped = wrap(ErrorKind.INTERNAL, 'stat', '/source', err)

        assert wrapped.kind == ErrorKind.NOT_FOUND
        assert wrapped.path == '/source/a.jpg'
        assert wrapped.__cause__ is err
        assert user_message(wrapped) == 'Path not found: /source/a.jpg'

    def test_os_error_becomes_io_failure(self):
        err = PermissionError(13, 'Permission denied', '/target/a.jpg')
        wrapped = wrap(ErrorKind.INTERNAL, 'copy', '/target', err)

        assert wrapped.kind == ErrorKind.IO_FAILURE
        assert str(wrapped) == 'copy: /target/a.jpg: Permission denied'
        assert user_message(wrapped) == 'I/O error during copy: /target/a.jpg (Permission denied)'

    def test_known_errors_pass_through(self):
        cancelled = OperationCancelled(op='scan')
        assert wrap(ErrorKind.IO_FAILURE, 'copy', '/x', cancelled) is cancelled

        config_error = ConfigurationError('bad')
        assert wrap(ErrorKind.INTERNAL, 'plan', '/x', config_error) is config_error

    def test_unexpected_error(self):
        wrapped = wrap(ErrorKind.INTERNAL, 'plan', '/source', RuntimeError('boom'))
        assert user_message(wrapped) == 'Unexpected error: plan: /source: boom'


class TestUserMessage:
    """One-line messages per error kind."""

    def test_configuration(self):
        assert user_message(ConfigurationError('source and target are required')) == \
            'Invalid configuration: source and target are required'

    def test_metadata(self):
        err = MetadataUnavailable('exif datetime not found', path='/source/a.jpg')
        assert user_message(err) == 'EXIF read failed: /source/a.jpg'

    def test_cancelled(self):
        assert user_message(OperationCancelled()) == 'Cancelled'

    def test_plain_exception(self):
        assert user_message(ValueError('odd')) == 'odd'

    def test_str_without_context(self):
        assert str(PhotoCopierError('plain')) == 'plain'


class TestCancelToken:
    """Thread-safe cancellation."""

    def test_initially_not_cancelled(self):
        token = CancelToken()
        assert not token.is_cancelled()
        token.raise_if_cancelled()

    def test_cancel_is_seen_by_other_threads(self):
        token = CancelToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()

        assert token.is_cancelled()
        with pytest.raises(OperationCancelled) as excinfo:
            token.raise_if_cancelled(op='copy', path='/target/a.jpg')
        assert excinfo.value.path == '/target/a.jpg'

    def test_cancel_is_idempotent(self):
        token = CancelToken()
        token.cancel()
        token.cancel()
        assert token.is_cancelled()
