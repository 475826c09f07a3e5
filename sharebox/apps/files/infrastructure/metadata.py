"""Metadata extraction utilities for files."""

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, final

from sharebox.apps.files.exceptions import InvalidPathError

# Namespace for identifiers of files addressed inside a share
SHARE_FILE_NAMESPACE: Final = uuid.UUID('6f1d3c2e-5b8a-4f0e-9c7d-2a4b6e8f0a1c')

_FORBIDDEN_FILENAMES: Final = frozenset(('', '.', '..'))


@final
@dataclass(frozen=True, slots=True)
class FileEntry:
    """Snapshot of one file or directory, computed on demand.

    Never persisted; listings rebuild entries from the filesystem.
    """

    filename: str
    extension: str
    is_directory: bool
    size: int
    file_id: uuid.UUID

    def as_dict(self) -> dict[str, Any]:
        """Serialize entry for JSON responses.

        Returns:
            Dictionary with JSON-compatible values.
        """
        return {
            'file_id': str(self.file_id),
            'filename': self.filename,
            'extension': self.extension,
            'is_directory': self.is_directory,
            'size': self.size,
        }


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension without dot, in the case it was stored with
        (e.g., 'pdf', 'JPG'). Returns empty string if no extension.
    """
    return Path(filename).suffix.removeprefix('.')


def file_id_for(storage_path: str) -> uuid.UUID:
    """Derive the stable identifier of a file inside a share.

    Derived from the full storage-relative path, so two files with the
    same name in different folders get different identifiers.

    Args:
        storage_path: Path relative to the storage root.

    Returns:
        Name-based (version 5) UUID.
    """
    return uuid.uuid5(SHARE_FILE_NAMESPACE, storage_path)


def derive_upload_filename(claimed_name: str | None) -> str:
    """Derive the stored filename from a client-supplied upload name.

    Any directory part is dropped, whichever separator the client used.

    Example: 'uploads/2024/report.pdf' -> 'report.pdf'

    Args:
        claimed_name: Filename sent by the client.

    Returns:
        Bare filename safe to join to a directory.

    Raises:
        InvalidPathError: If no usable filename remains.
    """
    if claimed_name is None:
        raise InvalidPathError('File name is missing')

    filename = claimed_name.rsplit('/', 1)[-1].rsplit('\\', 1)[-1]
    if filename in _FORBIDDEN_FILENAMES or '\x00' in filename:
        raise InvalidPathError('Invalid file name')
    return filename


def build_file_entry(path: Path, storage_path: str) -> FileEntry:
    """Build a FileEntry from the filesystem.

    Directories report size 0 and no extension. Symlinks are described
    without being followed.

    Args:
        path: Absolute path of the file or directory.
        storage_path: Same path relative to the storage root.

    Returns:
        FileEntry snapshot.
    """
    stat = path.lstat()
    is_directory = path.is_dir() and not path.is_symlink()
    return FileEntry(
        filename=path.name,
        extension='' if is_directory else get_file_extension(path.name),
        is_directory=is_directory,
        size=0 if is_directory else stat.st_size,
        file_id=file_id_for(storage_path),
    )
