"""Business logic for operations on a user's personal directory."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Final

from django.conf import settings

from sharebox.apps.files.exceptions import (
    ForbiddenError,
    InvalidPathError,
    NotFoundError,
    StorageIOError,
)
from sharebox.apps.files.infrastructure.metadata import (
    FileEntry,
    build_file_entry,
    derive_upload_filename,
    file_id_for,
)
from sharebox.apps.files.infrastructure.paths import (
    resolve,
    sandbox_root,
    to_storage_relative,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

# mkstemp creates files readable by the owner only
UPLOADED_FILE_MODE: Final = 0o644


def list_directory(user: 'User', path: str = '') -> list[FileEntry]:
    """List direct children of a directory in the user's sandbox.

    A missing directory is created and listed as empty. Symbolic links are
    left out of the listing.

    Args:
        user: Owner of the sandbox.
        path: Directory path relative to the sandbox root.
            Empty string lists the root directory.

    Returns:
        One FileEntry per child, in filesystem enumeration order.

    Raises:
        InvalidPathError: If path is invalid or is not a directory.
        ForbiddenError: If path resolves outside of the sandbox.
    """
    directory = resolve(sandbox_root(user), path)
    if not directory.is_dir():
        raise InvalidPathError(f'Not a directory: {path}')

    logger.debug('Listing directory: %s', directory)

    return [
        build_file_entry(child, to_storage_relative(child))
        for child in directory.iterdir()
        if not child.is_symlink()
    ]


def make_directory(user: 'User', path: str) -> FileEntry:
    """Create a directory, including missing intermediate directories.

    Creating an existing directory is not an error.

    Args:
        user: Owner of the sandbox.
        path: Directory path relative to the sandbox root.

    Returns:
        FileEntry describing the directory.

    Raises:
        InvalidPathError: If path is invalid or names an existing file.
    """
    directory = resolve(sandbox_root(user), path)
    if not directory.is_dir():
        raise InvalidPathError(f'Not a directory: {path}')

    logger.info('Directory ready: %s', directory)

    return FileEntry(
        filename=directory.name,
        extension='',
        is_directory=True,
        size=0,
        file_id=file_id_for(to_storage_relative(directory)),
    )


def save_file(
    user: 'User',
    path: str,
    uploaded_name: str | None,
    stream: BinaryIO,
) -> FileEntry:
    """Store an uploaded file inside a directory of the user's sandbox.

    The content is copied in fixed-size chunks into a temporary file next
    to the target, which then replaces the target. An existing file with
    the same name is overwritten, and stays intact if the upload fails.

    Args:
        user: Owner of the sandbox.
        path: Target directory relative to the sandbox root.
        uploaded_name: Filename claimed by the client.
        stream: File-like object with the uploaded content.

    Returns:
        FileEntry describing the stored file.

    Raises:
        InvalidPathError: If the path or filename is invalid, or the name
            is taken by a directory.
        ForbiddenError: If the target is a symbolic link.
        StorageIOError: If writing the file fails.
    """
    filename = derive_upload_filename(uploaded_name)
    directory = resolve(sandbox_root(user), path)
    if not directory.is_dir():
        raise InvalidPathError(f'Not a directory: {path}')

    target = directory / filename
    if target.is_symlink():
        raise ForbiddenError('Symbolic link detected')
    if target.is_dir():
        raise InvalidPathError(f'A directory named {filename} already exists')

    logger.info('Saving uploaded file: %s', target)

    try:
        fd, temp_name = tempfile.mkstemp(
            dir=directory,
            prefix='.upload-',
            suffix='.part',
        )
    except OSError as exc:
        logger.exception('Failed to create temporary file in: %s', directory)
        raise StorageIOError(f'Failed to save file: {filename}') from exc

    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, 'wb') as destination:
            shutil.copyfileobj(stream, destination, settings.SHAREBOX_CHUNK_SIZE)
        os.chmod(temp_path, UPLOADED_FILE_MODE)
        os.replace(temp_path, target)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        logger.exception('Failed to save file: %s', target)
        raise StorageIOError(f'Failed to save file: {filename}') from exc

    return build_file_entry(target, to_storage_relative(target))


def delete_path(user: 'User', path: str) -> FileEntry:
    """Delete a file or directory (recursively) from the user's sandbox.

    Args:
        user: Owner of the sandbox.
        path: Path relative to the sandbox root.

    Returns:
        FileEntry snapshot taken before removal.

    Raises:
        InvalidPathError: If path is invalid or names the sandbox root.
        NotFoundError: If nothing exists at path.
        StorageIOError: If removal fails.
    """
    root = sandbox_root(user)
    target = resolve(root, path, provision=False)
    if target == root:
        raise InvalidPathError('Cannot delete the sandbox root')
    if not target.exists() and not target.is_symlink():
        raise NotFoundError(f'File not found: {path}')

    snapshot = build_file_entry(target, to_storage_relative(target))

    logger.info('Deleting path: %s', target)

    try:
        _remove(target)
    except OSError as exc:
        logger.exception('Failed to delete path: %s', target)
        raise StorageIOError(f'Failed to delete: {path}') from exc

    return snapshot


def _remove(target: Path) -> None:
    # Links are removed themselves, never followed
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    else:
        target.unlink()
