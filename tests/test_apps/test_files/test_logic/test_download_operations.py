"""Tests for streaming downloads."""

import logging
import zipfile
from io import BytesIO

import pytest

from sharebox.apps.files.exceptions import (
    ForbiddenError,
    InvalidPathError,
    InvalidRequestError,
    NotFoundError,
    StorageIOError,
)
from sharebox.apps.files.logic.download_operations import (
    ARCHIVE_FILENAME,
    fetch_personal_file,
    serve,
    serve_many,
    serve_one,
)


def _read_archive(payload):
    archive = zipfile.ZipFile(BytesIO(b''.join(payload.chunks)))
    return {name: archive.read(name) for name in archive.namelist()}


@pytest.mark.usefixtures('extension_mime')
class TestServeOne:
    """Tests for single file downloads."""

    def test_streams_exact_bytes(self, storage_root, make_file):
        """Test content, length and headers of a single file."""
        content = bytes(range(256)) * 10
        target = make_file(storage_root, 'alice/docs/report.pdf', content)

        payload = serve_one(target)

        assert payload.filename == 'report.pdf'
        assert payload.content_type == 'application/pdf'
        assert payload.content_length == len(content)
        chunks = list(payload.chunks)
        assert len(chunks) > 1
        assert b''.join(chunks) == content

    def test_empty_file(self, storage_root, make_file):
        """Test an empty file streams no bytes."""
        target = make_file(storage_root, 'alice/empty.txt', b'')

        payload = serve_one(target)

        assert payload.content_length == 0
        assert b''.join(payload.chunks) == b''

    def test_outside_storage_root(self, tmp_path, make_file):
        """Test files outside the storage root are never served."""
        target = make_file(tmp_path, 'elsewhere/secret.txt')

        with pytest.raises(ForbiddenError):
            serve_one(target)

    def test_symlink(self, storage_root, make_file):
        """Test symbolic links are refused even inside the storage root."""
        target = make_file(storage_root, 'alice/real.txt')
        link = storage_root / 'alice' / 'link.txt'
        link.symlink_to(target)

        with pytest.raises(ForbiddenError):
            serve_one(link)

    def test_missing(self, storage_root):
        """Test missing files are reported as not found."""
        with pytest.raises(NotFoundError):
            serve_one(storage_root / 'alice' / 'ghost.txt')

    def test_directory(self, storage_root):
        """Test a directory is not a single file download."""
        directory = storage_root / 'alice' / 'docs'
        directory.mkdir(parents=True)

        with pytest.raises(InvalidPathError):
            serve_one(directory)

    def test_file_removed_while_streaming(self, storage_root, make_file, caplog):
        """Test read errors after the payload is built are wrapped and logged."""
        target = make_file(storage_root, 'alice/report.pdf', b'x' * 4096)
        payload = serve_one(target)
        target.unlink()

        with caplog.at_level(logging.ERROR), pytest.raises(StorageIOError):
            list(payload.chunks)

        assert 'Failed to stream file' in caplog.text


class TestServeMany:
    """Tests for zip archive downloads."""

    def test_two_files(self, storage_root, make_file):
        """Test entries are named relative to the storage root."""
        first = make_file(storage_root, 'alice/a.txt', b'first')
        second = make_file(storage_root, 'alice/docs/b.txt', b'second' * 1000)

        payload = serve_many([first, second])

        assert payload.filename == ARCHIVE_FILENAME
        assert payload.content_type == 'application/octet-stream'
        assert payload.content_length is None
        assert _read_archive(payload) == {
            'alice/a.txt': b'first',
            'alice/docs/b.txt': b'second' * 1000,
        }

    def test_directory_is_walked(self, storage_root, make_file, tmp_path):
        """Test directories are zipped recursively, skipping symlinks."""
        make_file(storage_root, 'alice/photos/cat.jpg', b'cat')
        make_file(storage_root, 'alice/photos/2024/dog.jpg', b'dog')
        outside = make_file(tmp_path, 'outside/secret.txt', b'secret')
        (storage_root / 'alice' / 'photos' / 'leak.txt').symlink_to(outside)

        payload = serve_many([storage_root / 'alice' / 'photos'])

        assert _read_archive(payload) == {
            'alice/photos/cat.jpg': b'cat',
            'alice/photos/2024/dog.jpg': b'dog',
        }

    def test_overlapping_targets_are_deduplicated(self, storage_root, make_file):
        """Test a file reachable twice is archived once."""
        inner = make_file(storage_root, 'alice/docs/a.txt', b'a')

        payload = serve_many([storage_root / 'alice' / 'docs', inner])

        assert list(_read_archive(payload)) == ['alice/docs/a.txt']

    def test_missing_target_fails_before_streaming(self, storage_root, make_file):
        """Test all targets are checked when the payload is built."""
        present = make_file(storage_root, 'alice/a.txt')

        with pytest.raises(NotFoundError):
            serve_many([present, storage_root / 'alice' / 'ghost.txt'])

    def test_outside_target(self, storage_root, make_file, tmp_path):
        """Test a single escaping target rejects the whole archive."""
        present = make_file(storage_root, 'alice/a.txt')
        outside = make_file(tmp_path, 'outside/b.txt')

        with pytest.raises(ForbiddenError):
            serve_many([present, outside])

    def test_member_removed_while_streaming(self, storage_root, make_file, caplog):
        """Test a member vanishing mid-archive is wrapped and logged."""
        first = make_file(storage_root, 'alice/a.txt', b'first')
        second = make_file(storage_root, 'alice/b.txt', b'second')
        payload = serve_many([first, second])
        second.unlink()

        with caplog.at_level(logging.ERROR), pytest.raises(StorageIOError):
            list(payload.chunks)

        assert 'Failed to stream archive member' in caplog.text
        assert 'b.txt' in caplog.text


class TestServe:
    """Tests for download mode selection."""

    def test_no_targets(self):
        """Test an empty request is invalid."""
        with pytest.raises(InvalidRequestError):
            serve([])

    @pytest.mark.usefixtures('extension_mime')
    def test_single_file_is_not_zipped(self, storage_root, make_file):
        """Test one file is served as-is."""
        target = make_file(storage_root, 'alice/a.txt', b'plain')

        payload = serve([target])

        assert payload.filename == 'a.txt'
        assert payload.content_length == 5

    def test_single_directory_is_zipped(self, storage_root, make_file):
        """Test one directory becomes an archive."""
        make_file(storage_root, 'alice/docs/a.txt', b'a')

        payload = serve([storage_root / 'alice' / 'docs'])

        assert payload.filename == ARCHIVE_FILENAME
        assert _read_archive(payload) == {'alice/docs/a.txt': b'a'}


@pytest.mark.django_db
@pytest.mark.usefixtures('extension_mime')
class TestFetchPersonalFile:
    """Tests for downloads from the caller's own sandbox."""

    def test_own_file(self, user, user_root, make_file):
        """Test a user downloads a file from their sandbox."""
        make_file(user_root, 'docs/notes.txt', b'my notes')

        payload = fetch_personal_file(user, 'docs/notes.txt')

        assert payload.content_type == 'text/plain'
        assert b''.join(payload.chunks) == b'my notes'

    def test_traversal(self, user, other_user, storage_root, make_file):
        """Test another user's file cannot be fetched."""
        make_file(storage_root, 'otheruser/secret.txt', b'secret')

        with pytest.raises(InvalidPathError):
            fetch_personal_file(user, '../otheruser/secret.txt')

    def test_missing_creates_nothing(self, user, user_root):
        """Test a missing file is not found and nothing is provisioned."""
        with pytest.raises(NotFoundError):
            fetch_personal_file(user, 'ghost/notes.txt')

        assert not (user_root / 'ghost').exists()
