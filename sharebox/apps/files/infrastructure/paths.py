"""Confinement of user-supplied paths to per-user sandbox roots.

Relative paths come from URLs and share requests. They are validated
textually first (no I/O), then joined to the sandbox root, normalized and
checked to still lie inside it.

Storage layout: {SHAREBOX_STORAGE_ROOT}/{username}/folder/file.ext
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final

from django.conf import settings

from sharebox.apps.files.exceptions import (
    ForbiddenError,
    InvalidPathError,
    StorageIOError,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

_PARENT_SEGMENT: Final = '..'
_ROOT_MARKERS: Final = ('/', '\\')
_NULL_BYTE: Final = '\x00'


def get_storage_root() -> Path:
    """Get the normalized base storage root.

    Returns:
        Absolute path configured in SHAREBOX_STORAGE_ROOT.
    """
    return normalize(Path(settings.SHAREBOX_STORAGE_ROOT))


def normalize(path: Path) -> Path:
    """Make a path absolute and collapse redundant segments.

    Purely lexical: symbolic links are not followed.

    Args:
        path: Path to normalize.

    Returns:
        Normalized absolute path.
    """
    return Path(os.path.normpath(os.path.abspath(path)))


def is_within(path: Path, root: Path) -> bool:
    """Check that path is root itself or one of its descendants.

    Compares whole path components, so /data/bob is not inside /data/bo.

    Args:
        path: Normalized absolute candidate path.
        root: Normalized absolute root.

    Returns:
        True if path lies inside root.
    """
    return path == root or root in path.parents


def sandbox_root(user: 'User') -> Path:
    """Get the sandbox root of a user.

    The directory itself is created lazily by :func:`resolve`, so input
    rejected during validation leaves no trace on disk.

    Args:
        user: Owner of the sandbox.

    Returns:
        Absolute path of the user's sandbox.

    Raises:
        ForbiddenError: If the username would place the sandbox outside
            of the storage root.
    """
    storage_root = get_storage_root()
    root = normalize(storage_root / user.get_username())
    if root == storage_root or not is_within(root, storage_root):
        raise ForbiddenError('Sandbox root is outside of the storage root')
    return root


def validate_relative_path(relative_path: str, root: Path) -> None:
    """Validate a user-supplied relative path without touching the disk.

    Args:
        relative_path: Path relative to the sandbox root.
        root: Sandbox root the path will be joined to.

    Raises:
        InvalidPathError: If the path contains a parent segment, starts at
            the filesystem root, contains a NUL byte, or already embeds the
            sandbox or storage root.
    """
    if _NULL_BYTE in relative_path:
        raise InvalidPathError('Invalid path: NUL byte')

    if relative_path.startswith(_ROOT_MARKERS):
        raise InvalidPathError('Invalid path: absolute path')

    segments = relative_path.replace('\\', '/').split('/')
    if _PARENT_SEGMENT in segments:
        raise InvalidPathError('Invalid path: parent directory segment')

    for forbidden in (str(root), str(get_storage_root())):
        if forbidden in relative_path:
            raise InvalidPathError('Invalid path: embedded root directory')


def resolve(
    root: Path,
    relative_path: str,
    *,
    provision: bool = True,
) -> Path:
    """Resolve a relative path inside a sandbox root.

    Empty path resolves to the root itself. With ``provision`` enabled a
    missing directory is created (including parents), so resolving a
    directory also provisions it.

    Args:
        root: Sandbox root.
        relative_path: User-supplied path relative to root.
        provision: Create the resolved directory if it does not exist.

    Returns:
        Normalized absolute path inside root.

    Raises:
        InvalidPathError: If the path fails textual validation, or a
            missing directory would have to be created under a file.
        ForbiddenError: If the path resolves outside of root, directly or
            through a symbolic link.
        StorageIOError: If provisioning the directory fails.
    """
    validate_relative_path(relative_path, root)

    root = normalize(root)
    candidate = normalize(root / relative_path) if relative_path else root

    if not is_within(candidate, root):
        logger.warning(
            'Rejected path outside of sandbox: %s (root: %s)',
            relative_path,
            root,
        )
        raise ForbiddenError('Path is outside of the sandbox')

    real_root = Path(os.path.realpath(root))
    if not is_within(Path(os.path.realpath(candidate)), real_root):
        logger.warning('Rejected path escaping through symlink: %s', candidate)
        raise ForbiddenError('Path is outside of the sandbox')

    if provision and not candidate.exists():
        _provision(candidate)

    return candidate


def to_storage_relative(path: Path) -> str:
    """Convert an absolute path to its storage-relative form.

    Example: /srv/storage/alice/docs/a.pdf -> 'alice/docs/a.pdf'

    Args:
        path: Absolute path inside the storage root.

    Returns:
        POSIX path relative to the storage root.

    Raises:
        ForbiddenError: If path is not inside the storage root.
    """
    storage_root = get_storage_root()
    normalized = normalize(path)
    if not is_within(normalized, storage_root):
        raise ForbiddenError('Path is outside of the storage root')
    return normalized.relative_to(storage_root).as_posix()


def from_storage_relative(storage_path: str) -> Path:
    """Convert a storage-relative path back to an absolute path.

    The result is not checked here; callers serving it apply the
    confinement and symlink checks.

    Args:
        storage_path: POSIX path relative to the storage root.

    Returns:
        Normalized absolute path.
    """
    return normalize(get_storage_root().joinpath(*PurePosixPath(storage_path).parts))


def _provision(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except (NotADirectoryError, FileExistsError) as exc:
        logger.warning('Cannot create directory under a file: %s', directory)
        raise InvalidPathError(f'Not a directory: {directory.name}') from exc
    except OSError as exc:
        logger.exception('Failed to create directory: %s', directory)
        raise StorageIOError('Failed to create directory') from exc
