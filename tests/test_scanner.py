"""Tests for source scanning and pre-filtering."""

from pathlib import Path

import pytest

from photo_copier.cancellation import CancelToken
from photo_copier.errors import OperationCancelled
from photo_copier.scanner import Scanner

from conftest import SOURCE, TARGET


class TestRawJpegDeduplication:
    """JPEGs are dropped when a RAW with the same base name exists."""

    def test_jpeg_with_raw_sibling_is_skipped(self, fake_fs, when):
        fs = fake_fs({
            SOURCE / 'DSC01.ARW': when,
            SOURCE / 'DSC01.JPG': when,
            SOURCE / 'DSC02.JPG': when,
        })
        result = Scanner(fs).scan(SOURCE, TARGET)

        assert result.skipped_jpegs == 1
        assert set(result.candidates) == {SOURCE / 'DSC01.ARW', SOURCE / 'DSC02.JPG'}
        assert result.raw_found == 1
        assert result.jpeg_found == 2

    def test_dot_only_names_pair_up(self, fake_fs, when):
        fs = fake_fs({SOURCE / '.ARW': when, SOURCE / '.jpg': when})
        result = Scanner(fs).scan(SOURCE, TARGET)

        assert result.candidates == (SOURCE / '.ARW',)
        assert result.skipped_jpegs == 1

    def test_detection_independent_of_walk_order(self, fake_fs, when):
        # JPEG walked before its RAW sibling, in a different directory and case
        fs = fake_fs({
            SOURCE / 'a' / 'dsc01.jpg': when,
            SOURCE / 'b' / 'DSC01.ARW': when,
        })
        result = Scanner(fs).scan(SOURCE, TARGET)

        assert result.skipped_jpegs == 1
        assert result.candidates == (SOURCE / 'b' / 'DSC01.ARW',)

    def test_other_files_are_ignored_silently(self, fake_fs, when):
        fs = fake_fs({
            SOURCE / 'notes.txt': when,
            SOURCE / 'clip.mp4': when,
            SOURCE / 'photo.jpeg': when,
        })
        result = Scanner(fs).scan(SOURCE, TARGET)

        assert result.candidates == (SOURCE / 'photo.jpeg',)
        assert result.skipped_jpegs == 0
        assert result.skipped_raws_dupl == 0

    def test_directories_are_not_candidates(self, fake_fs, when):
        fs = fake_fs({SOURCE / 'nested' / 'deep' / 'IMG.CR2': when})
        result = Scanner(fs).scan(SOURCE, TARGET)
        assert result.candidates == (SOURCE / 'nested' / 'deep' / 'IMG.CR2',)


class TestDuplicateTargets:
    """Existing targets are dropped early unless overrides are allowed."""

    def test_existing_targets_dropped_without_override(self, fake_fs, when):
        fs = fake_fs(
            {SOURCE / 'DSC01.ARW': when, SOURCE / 'DSC02.JPG': when, SOURCE / 'DSC03.ARW': when},
            existing=[TARGET / 'DSC01.ARW', TARGET / 'DSC02.JPG'],
        )
        result = Scanner(fs, allow_override=False).scan(SOURCE, TARGET)

        assert result.candidates == (SOURCE / 'DSC03.ARW',)
        assert result.skipped_raws_dupl == 1
        assert result.skipped_jpegs_dupl == 1

    def test_existing_targets_kept_with_override(self, fake_fs, when):
        fs = fake_fs({SOURCE / 'DSC01.ARW': when}, existing=[TARGET / 'DSC01.ARW'])
        result = Scanner(fs, allow_override=True).scan(SOURCE, TARGET)

        assert result.candidates == (SOURCE / 'DSC01.ARW',)
        assert result.skipped_raws_dupl == 0

    def test_target_path_keeps_relative_structure(self, fake_fs, when):
        fs = fake_fs({SOURCE / '2024' / 'DSC01.ARW': when}, existing=[TARGET / 'DSC01.ARW'])
        result = Scanner(fs).scan(SOURCE, TARGET)
        # Only TARGET/2024/DSC01.ARW would be a duplicate
        assert result.candidates == (SOURCE / '2024' / 'DSC01.ARW',)


class TestScanFailures:
    """Walk errors and cancellation abort the scan."""

    def test_walk_error_propagates(self, fake_fs, when):
        fs = fake_fs({SOURCE / 'DSC01.ARW': when},
                     walk_error=PermissionError(13, 'Permission denied', str(SOURCE)))
        with pytest.raises(PermissionError):
            Scanner(fs).scan(SOURCE, TARGET)

    def test_cancelled_token_aborts_walk(self, fake_fs, when):
        fs = fake_fs({SOURCE / 'DSC01.ARW': when})
        token = CancelToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            Scanner(fs).scan(SOURCE, TARGET, token)

    def test_scans_real_directory(self, tmp_path, create_test_files):
        from photo_copier.filesystem import LocalFileSystem

        create_test_files('DSC01.ARW')
        create_test_files('DSC01.JPG')
        create_test_files('sub/IMG_2.jpg')
        create_test_files('sub/readme.md')

        result = Scanner(LocalFileSystem()).scan(tmp_path / 'source', tmp_path / 'target')

        assert sorted(Path(p).name for p in result.candidates) == ['DSC01.ARW', 'IMG_2.jpg']
        assert result.skipped_jpegs == 1
