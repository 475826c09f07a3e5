"""Shared fixtures for sharing app tests."""

from pathlib import Path

import pytest
from django.contrib.auth import get_user_model

User = get_user_model()

_REPORT_CONTENT = b'%PDF-1.4\n' + b'r' * 2048
_NOTES_CONTENT = b'meeting notes\n'
_CAT_CONTENT = b'\xff\xd8\xff' + b'c' * 512


@pytest.fixture(autouse=True)
def storage_root(settings, tmp_path):
    """Point the storage root at a fresh temporary directory.

    Returns:
        Path of the storage root.
    """
    root = tmp_path / 'storage'
    settings.SHAREBOX_STORAGE_ROOT = str(root)
    settings.SHAREBOX_CHUNK_SIZE = 1024
    settings.SHAREBOX_MIME_DETECTOR = (
        'sharebox.apps.files.infrastructure.mime.ExtensionMimeDetector'
    )
    settings.PASSWORD_HASHERS = [
        'django.contrib.auth.hashers.MD5PasswordHasher',
    ]
    return root


@pytest.fixture
def user(db):
    """Create the share owner.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create a user acting as share recipient.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def third_user(db):
    """Create a user that is not a recipient of anything.

    Returns:
        Third user instance.
    """
    return User.objects.create_user(
        username='thirduser',
        password='testpass123',
        email='third@example.com',
    )


@pytest.fixture
def owner_files(storage_root, user) -> Path:
    """Populate the owner's sandbox.

    Layout::

        docs/report.pdf
        docs/notes.txt
        photos/cat.jpg

    Returns:
        Path of the owner's sandbox root.
    """
    root = storage_root / user.username
    (root / 'docs').mkdir(parents=True)
    (root / 'photos').mkdir()
    (root / 'docs' / 'report.pdf').write_bytes(_REPORT_CONTENT)
    (root / 'docs' / 'notes.txt').write_bytes(_NOTES_CONTENT)
    (root / 'photos' / 'cat.jpg').write_bytes(_CAT_CONTENT)
    return root
