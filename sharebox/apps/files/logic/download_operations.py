"""Business logic for streaming downloads.

Single files are streamed as-is; several files (or a directory) are packed
into a zip archive written entry by entry while the response is consumed.
Neither path ever holds a whole file or archive in memory or on disk.

All checks (confinement to the storage root, symlinks, existence) run
before the first byte is produced, so a rejected request never starts
streaming.
"""

import logging
import os
import zipfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final, final

from django.conf import settings

from sharebox.apps.files.exceptions import (
    ForbiddenError,
    InvalidPathError,
    InvalidRequestError,
    NotFoundError,
    StorageIOError,
)
from sharebox.apps.files.infrastructure.mime import (
    DEFAULT_MIME_TYPE,
    get_mime_detector,
)
from sharebox.apps.files.infrastructure.paths import (
    get_storage_root,
    is_within,
    normalize,
    resolve,
    sandbox_root,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

ARCHIVE_FILENAME: Final = 'archive.zip'


@final
@dataclass(frozen=True, slots=True)
class DownloadPayload:
    """Everything the HTTP layer needs to send a download.

    ``content_length`` is None for archives, whose size is unknown until
    the last entry is written.
    """

    filename: str
    content_type: str
    content_length: int | None
    chunks: Iterator[bytes]


def serve(paths: list[Path]) -> DownloadPayload:
    """Serve download targets, picking single file or archive mode.

    Exactly one regular file is served as-is; anything else (several
    targets, or a directory) becomes a zip archive.

    Args:
        paths: Absolute paths to download.

    Returns:
        DownloadPayload for the response.

    Raises:
        InvalidRequestError: If no target is given.
    """
    if not paths:
        raise InvalidRequestError('No files requested')

    if len(paths) == 1 and not paths[0].is_dir():
        return serve_one(paths[0])
    return serve_many(paths)


def serve_one(path: Path) -> DownloadPayload:
    """Stream a single file from the storage root.

    Args:
        path: Absolute path of the file.

    Returns:
        DownloadPayload with exact length and sniffed content type.

    Raises:
        ForbiddenError: If path is outside the storage root or a symlink.
        NotFoundError: If the file does not exist.
        InvalidPathError: If path is a directory.
    """
    target = _check_servable(path, get_storage_root())
    if not target.is_file():
        raise InvalidPathError(f'Not a regular file: {target.name}')

    content_length = target.stat().st_size
    content_type = get_mime_detector().detect(target)

    logger.info(
        'Streaming file: %s (%d bytes, %s)',
        target,
        content_length,
        content_type,
    )

    return DownloadPayload(
        filename=target.name,
        content_type=content_type,
        content_length=content_length,
        chunks=_iter_file(target, settings.SHAREBOX_CHUNK_SIZE),
    )


def serve_many(paths: list[Path]) -> DownloadPayload:
    """Stream several files and directories as one zip archive.

    Directories are included recursively; symlinks found inside them are
    skipped. Entry names are relative to the storage root, never absolute.

    Args:
        paths: Absolute paths of files and directories.

    Returns:
        DownloadPayload named archive.zip.

    Raises:
        ForbiddenError: If any path is outside the storage root or a symlink.
        NotFoundError: If any path does not exist.
    """
    storage_root = get_storage_root()
    targets = [_check_servable(path, storage_root) for path in paths]

    logger.info('Streaming zip archive of %d targets', len(targets))

    return DownloadPayload(
        filename=ARCHIVE_FILENAME,
        content_type=DEFAULT_MIME_TYPE,
        content_length=None,
        chunks=_iter_archive(
            _iter_members(targets, storage_root),
            settings.SHAREBOX_CHUNK_SIZE,
        ),
    )


def fetch_personal_file(user: 'User', path: str) -> DownloadPayload:
    """Download a file from the caller's own sandbox.

    Args:
        user: Authenticated owner of the sandbox.
        path: File path relative to the sandbox root.

    Returns:
        DownloadPayload for the file.

    Raises:
        InvalidPathError: If path is invalid or names a directory.
        ForbiddenError: If path escapes the sandbox or is a symlink.
        NotFoundError: If the file does not exist.
    """
    target = resolve(sandbox_root(user), path, provision=False)
    return serve_one(target)


def _check_servable(path: Path, storage_root: Path) -> Path:
    target = normalize(path)
    if not is_within(target, storage_root):
        logger.warning('Rejected download outside of storage root: %s', target)
        raise ForbiddenError('File path is outside of the base directory')
    if target.is_symlink():
        logger.warning('Rejected download of symbolic link: %s', target)
        raise ForbiddenError('Symbolic link detected')
    if not target.exists():
        raise NotFoundError(f'File not found: {target.name}')
    return target


def _iter_file(path: Path, chunk_size: int) -> Iterator[bytes]:
    try:
        with path.open('rb') as source:
            yield from iter(lambda: source.read(chunk_size), b'')
    except OSError as exc:
        logger.exception('Failed to stream file: %s', path)
        raise StorageIOError(f'Failed to read file: {path.name}') from exc


def _iter_members(
    targets: list[Path],
    storage_root: Path,
) -> Iterator[tuple[Path, str]]:
    """Yield (file, entry name) pairs, walking directories lazily."""
    seen: set[str] = set()
    for target in targets:
        for member in _walk_files(target):
            arcname = member.relative_to(storage_root).as_posix()
            if arcname in seen:
                continue
            seen.add(arcname)
            yield member, arcname


def _walk_files(target: Path) -> Iterator[Path]:
    if not target.is_dir():
        yield target
        return

    # os.walk does not descend into symlinked directories by default
    for dirpath, _dirnames, filenames in os.walk(target):
        for filename in filenames:
            candidate = Path(dirpath, filename)
            if not candidate.is_symlink() and candidate.is_file():
                yield candidate


class _ArchiveSink:
    """Write-only stream collecting zip output between generator steps.

    It offers no ``tell``/``seek``, so zipfile treats it as unseekable and
    writes data descriptors after each entry instead of seeking back.
    """

    def __init__(self) -> None:
        self._pending: list[bytes] = []

    def write(self, data: bytes) -> int:
        self._pending.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        """Nothing to flush; data is handed out by drain()."""

    def drain(self) -> Iterator[bytes]:
        if self._pending:
            data = b''.join(self._pending)
            self._pending.clear()
            yield data


def _iter_archive(
    members: Iterable[tuple[Path, str]],
    chunk_size: int,
) -> Iterator[bytes]:
    sink = _ArchiveSink()
    current: Path | None = None
    try:
        with zipfile.ZipFile(sink, mode='w', compression=zipfile.ZIP_DEFLATED) as archive:
            for current, arcname in members:
                info = zipfile.ZipInfo.from_file(
                    current,
                    arcname,
                    strict_timestamps=False,
                )
                info.compress_type = zipfile.ZIP_DEFLATED
                with current.open('rb') as source, archive.open(info, mode='w') as entry:
                    for chunk in iter(lambda: source.read(chunk_size), b''):  # noqa: B023
                        entry.write(chunk)
                        yield from sink.drain()
                yield from sink.drain()
        yield from sink.drain()
    except OSError as exc:
        logger.exception('Failed to stream archive member: %s', current)
        raise StorageIOError('Failed to build archive') from exc
