"""Shared fixtures for files app tests."""

from pathlib import Path

import pytest
from django.contrib.auth import get_user_model

User = get_user_model()


@pytest.fixture(autouse=True)
def storage_root(settings, tmp_path):
    """Point the storage root at a fresh temporary directory.

    Returns:
        Path of the (not yet created) storage root.
    """
    root = tmp_path / 'storage'
    settings.SHAREBOX_STORAGE_ROOT = str(root)
    settings.SHAREBOX_CHUNK_SIZE = 1024
    settings.PASSWORD_HASHERS = [
        'django.contrib.auth.hashers.MD5PasswordHasher',
    ]
    return root


@pytest.fixture
def extension_mime(settings):
    """Use extension based MIME detection for predictable content types."""
    settings.SHAREBOX_MIME_DETECTOR = (
        'sharebox.apps.files.infrastructure.mime.ExtensionMimeDetector'
    )


@pytest.fixture
def user(db):
    """Create test user.

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
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def user_root(storage_root, user):
    """Create the sandbox directory of the test user.

    Returns:
        Path of the sandbox root.
    """
    root = storage_root / user.username
    root.mkdir(parents=True)
    return root


@pytest.fixture
def make_file():
    """Write files below a directory, creating parents as needed.

    Returns:
        Callable (root, relative_path, content) -> Path.
    """
    def factory(root: Path, relative_path: str, content: bytes = b'content') -> Path:
        target = root / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return target
    return factory
