"""Business logic for listing and downloading shared files."""

import logging
import uuid
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from sharebox.apps.files.exceptions import ForbiddenError, NotFoundError
from sharebox.apps.files.infrastructure.metadata import (
    FileEntry,
    build_file_entry,
    file_id_for,
)
from sharebox.apps.files.infrastructure.paths import (
    from_storage_relative,
    get_storage_root,
    is_within,
)
from sharebox.apps.files.logic.download_operations import (
    DownloadPayload,
    serve,
    serve_one,
)
from sharebox.apps.sharing.logic.authorization import (
    authorize_download,
    authorize_list,
    ensure_allowed,
)
from sharebox.apps.sharing.logic.share_operations import find_share
from sharebox.apps.sharing.models import ShareRecord, ShareType

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)


def list_share(share_uri: uuid.UUID, password: str = '') -> list[FileEntry]:
    """List the files of a share.

    Entries carry the ``file_id`` used to pick files for download.

    Args:
        share_uri: Share identifier.
        password: Password for protected website shares.

    Returns:
        One FileEntry per shared path, in share order.

    Raises:
        NotFoundError: If the share does not exist, is a direct link, or a
            shared file has been removed since.
        UnauthorizedError: If the password does not match.
    """
    share = find_share(share_uri)
    ensure_allowed(authorize_list(share, password), share.id)

    entries = []
    for storage_path in share.files:
        path = _existing_share_path(storage_path)
        entries.append(build_file_entry(path, storage_path))
    return entries


def download_share(
    share_uri: uuid.UUID,
    file_ids: Iterable[uuid.UUID],
    user: 'User | None',
    password: str = '',
) -> DownloadPayload:
    """Download files of an internal or website share.

    One requested file is streamed directly, several are zipped.

    Args:
        share_uri: Share identifier.
        file_ids: Identifiers of the requested files (from list_share).
        user: Authenticated requester, None for anonymous requests.
        password: Password for protected website shares.

    Returns:
        DownloadPayload for the response.

    Raises:
        NotFoundError: If the share or a requested file is unknown, or the
            share is a direct link.
        UnauthorizedError: If the password is wrong, or an internal share is
            requested anonymously.
        ForbiddenError: If the requester is not a recipient.
        InvalidRequestError: If no file is requested.
    """
    share = find_share(share_uri)
    if share.share_type == ShareType.DIRECT_LINK:
        # Served only at the direct link fetch path
        raise NotFoundError(f'Share not found: {share_uri}')

    ensure_allowed(authorize_download(share, user, password), share.id)

    paths = _select_files(share, file_ids)
    logger.info('Downloading %d files from share %s', len(paths), share.id)
    return serve(paths)


def fetch_direct_link(share_uri: uuid.UUID) -> DownloadPayload:
    """Fetch the single file of a direct link share.

    Args:
        share_uri: Share identifier.

    Returns:
        DownloadPayload for the bound file.

    Raises:
        NotFoundError: If the share does not exist, is not a direct link,
            or the file has been removed.
    """
    share = find_share(share_uri)
    if share.share_type != ShareType.DIRECT_LINK:
        raise NotFoundError(f'Share not found: {share_uri}')

    ensure_allowed(authorize_download(share, None), share.id)

    return serve_one(from_storage_relative(share.files[0]))


def _existing_share_path(storage_path: str) -> Path:
    path = from_storage_relative(storage_path)
    if not is_within(path, get_storage_root()):
        raise ForbiddenError('File path is outside of the base directory')
    if path.is_symlink():
        raise ForbiddenError('Symbolic link detected')
    if not path.exists():
        raise NotFoundError(f'Shared file no longer exists: {path.name}')
    return path


def _select_files(
    share: ShareRecord,
    file_ids: Iterable[uuid.UUID],
) -> list[Path]:
    by_id = {file_id_for(storage_path): storage_path for storage_path in share.files}

    selected: list[Path] = []
    for file_id in dict.fromkeys(file_ids):
        storage_path = by_id.get(file_id)
        if storage_path is None:
            raise NotFoundError(
                f'File {file_id} is not included in share {share.id}',
            )
        selected.append(from_storage_relative(storage_path))
    return selected
