"""Shared fixtures for photo copier tests."""

import os
import random
import threading
import time
from datetime import datetime
from pathlib import Path

import pytest
import yaml

from photo_copier.errors import MetadataUnavailable


SOURCE = Path('/source')
TARGET = Path('/target')


class FakeFileSystem:
    """In-memory FileSystem: files with modification times and a set of existing targets."""

    def __init__(self, files=None, existing=(), walk_error=None, stat_errors=()):
        self.files = {Path(p): mtime for p, mtime in (files or {}).items()}
        self.existing = {Path(p) for p in existing}
        self.walk_error = walk_error
        self.stat_errors = {Path(p) for p in stat_errors}
        self.copies = []
        self.created_dirs = []
        self.copy_error_on = None
        self._lock = threading.Lock()

    def walk(self, root):
        root = Path(root)
        seen_dirs = set()
        for path in self.files:
            for parent in reversed(path.parents):
                if parent != root and root in parent.parents and parent not in seen_dirs:
                    seen_dirs.add(parent)
                    yield parent, True
            if self.walk_error is not None:
                raise self.walk_error
            yield path, False

    def stat(self, path):
        path = Path(path)
        if path in self.stat_errors or path not in self.files:
            raise FileNotFoundError(2, 'No such file or directory', str(path))
        return self.files[path]

    def exists(self, path):
        path = Path(path)
        return path in self.existing or path in self.files

    def ensure_dir(self, path):
        self.created_dirs.append(Path(path))

    def copy_file(self, source, destination):
        if self.copy_error_on is not None and Path(source) == self.copy_error_on:
            raise PermissionError(13, 'Permission denied', str(destination))
        with self._lock:
            self.copies.append((Path(source), Path(destination)))


class TrackingReader:
    """MetadataReader returning fixed capture times and recording every call."""

    def __init__(self, timestamps=None, jitter=0.0, seed=None, on_call=None):
        self.timestamps = {Path(p): ts for p, ts in (timestamps or {}).items()}
        self.calls = []
        self.jitter = jitter
        self.on_call = on_call
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    def capture_time(self, path, cancel_token=None):
        path = Path(path)
        with self._lock:
            self.calls.append(path)
            delay = self._random.uniform(0, self.jitter) if self.jitter else 0
        if self.on_call is not None:
            self.on_call(path, cancel_token)
        if delay:
            time.sleep(delay)
        if path not in self.timestamps:
            raise MetadataUnavailable("exif datetime not found", path=str(path))
        return self.timestamps[path]


@pytest.fixture
def fake_fs():
    """Factory fixture: build a FakeFileSystem."""

    def _create(files=None, existing=(), **kwargs):
        return FakeFileSystem(files=files, existing=existing, **kwargs)

    return _create


@pytest.fixture
def tracking_reader():
    """Factory fixture: build a TrackingReader."""

    def _create(timestamps=None, **kwargs):
        return TrackingReader(timestamps=timestamps, **kwargs)

    return _create


@pytest.fixture
def when():
    """Fixed reference time used across tests."""
    return datetime(2024, 10, 2, 15, 1, 0)


@pytest.fixture
def create_test_files(tmp_path):
    """Factory fixture: create files on disk with given content and modification time."""

    def _create(relative_path, content=b'test-content', base='source', mtime=None):
        full_path = tmp_path / base / relative_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
        if mtime is not None:
            stamp = mtime.timestamp()
            os.utime(full_path, (stamp, stamp))
        return full_path

    return _create


@pytest.fixture
def config_file(tmp_path):
    """Factory fixture: write a YAML config file and return its path."""

    def _write(data=None, filename='config.yml'):
        config_data = data if data is not None else {
            'photo_copier': {
                'process': {'workers': 2, 'verify_copies': True},
                'safety': {'min_free_space_mb': 0},
                'logging': {'level': 'INFO'},
            }
        }
        config_path = tmp_path / filename
        with open(config_path, 'w') as f:
            yaml.dump(config_data, f)
        return config_path

    return _write
