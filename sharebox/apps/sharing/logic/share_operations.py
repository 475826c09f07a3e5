"""Business logic for the share record lifecycle."""

import logging
import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import QuerySet

from sharebox.apps.files.exceptions import (
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from sharebox.apps.files.infrastructure.paths import (
    from_storage_relative,
    resolve,
    sandbox_root,
    to_storage_relative,
)
from sharebox.apps.sharing.infrastructure.hashing import (
    PasswordHasher,
    get_password_hasher,
)
from sharebox.apps.sharing.models import ShareRecord, ShareType

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)


def create_share(  # noqa: WPS211
    owner: 'User',
    paths: Iterable[str],
    share_type: ShareType | str,
    password: str | None = None,
    recipients: Iterable[int] | None = None,
    hasher: PasswordHasher | None = None,
) -> uuid.UUID:
    """Publish files of the owner's sandbox under a new share URI.

    Every check runs before the record is written; a rejected request
    persists nothing.

    Args:
        owner: User creating the share.
        paths: Paths relative to the owner's sandbox root.
        share_type: INTERNAL, WEBSITE or DIRECT_LINK.
        password: Optional password, kept (hashed) for website shares only.
        recipients: Account IDs allowed to access an internal share.
        hasher: Password hasher; the configured one by default.

    Returns:
        The share URI (generated record ID).

    Raises:
        InvalidRequestError: If the share type, paths or recipients
            violate the share invariants.
        InvalidPathError: If a path is malformed.
        ForbiddenError: If a path leaves the sandbox or is a symlink.
    """
    share_type = _parse_share_type(share_type)
    storage_paths = _resolve_share_paths(owner, paths)
    recipient_ids = list(dict.fromkeys(recipients or ()))
    password = password or ''

    if share_type == ShareType.INTERNAL and not recipient_ids:
        raise InvalidRequestError('Internal share requires at least one recipient')

    if share_type == ShareType.DIRECT_LINK:
        _validate_direct_link(storage_paths, password)

    recipient_users = []
    if share_type == ShareType.INTERNAL:
        recipient_users = _load_recipients(recipient_ids)

    hashed_password = ''
    if share_type == ShareType.WEBSITE and password.strip():
        hashed_password = (hasher or get_password_hasher()).encode(password)

    with transaction.atomic():
        share = ShareRecord.objects.create(
            owner=owner,
            share_type=share_type,
            files=storage_paths,
            password=hashed_password,
        )
        if recipient_users:
            share.recipients.set(recipient_users)

    logger.info(
        'Share created: %s (%s, %d files, owner: %s)',
        share.id,
        share_type,
        len(storage_paths),
        owner.get_username(),
    )
    return share.id


def find_share(share_uri: uuid.UUID) -> ShareRecord:
    """Get a share by its URI.

    Args:
        share_uri: Share identifier.

    Returns:
        ShareRecord instance.

    Raises:
        NotFoundError: If no such share exists.
    """
    try:
        return ShareRecord.objects.select_related('owner').get(id=share_uri)
    except ShareRecord.DoesNotExist as exc:
        raise NotFoundError(f'Share not found: {share_uri}') from exc


def list_owned_shares(owner: 'User') -> QuerySet[ShareRecord]:
    """List shares created by a user, newest first.

    Args:
        owner: Share owner.

    Returns:
        QuerySet of the owner's shares.
    """
    return ShareRecord.objects.filter(owner=owner).prefetch_related('recipients')


def delete_share(owner: 'User', share_uri: uuid.UUID) -> None:
    """Delete a share. Only its owner may do so; files are untouched.

    Args:
        owner: User requesting the deletion.
        share_uri: Share identifier.

    Raises:
        NotFoundError: If the share does not exist or belongs to someone
            else.
    """
    deleted, _ = ShareRecord.objects.filter(id=share_uri, owner=owner).delete()
    if not deleted:
        raise NotFoundError(f'Share not found: {share_uri}')

    logger.info('Share deleted: %s (owner: %s)', share_uri, owner.get_username())


def is_orphaned(share: ShareRecord) -> bool:
    """Check whether none of the shared files exist anymore.

    Args:
        share: Share to inspect.

    Returns:
        True if every shared path is gone.
    """
    return not any(
        from_storage_relative(storage_path).exists()
        for storage_path in share.files
    )


def prune_orphaned_shares(*, dry_run: bool = False) -> list[uuid.UUID]:
    """Delete shares whose files have all been removed.

    Args:
        dry_run: Only report what would be deleted.

    Returns:
        IDs of the orphaned shares.
    """
    orphaned = [
        share.id
        for share in ShareRecord.objects.iterator()
        if is_orphaned(share)
    ]

    if orphaned and not dry_run:
        ShareRecord.objects.filter(id__in=orphaned).delete()
        logger.info('Pruned %d orphaned shares', len(orphaned))

    return orphaned


def _parse_share_type(share_type: ShareType | str) -> ShareType:
    try:
        return ShareType(share_type)
    except ValueError as exc:
        raise InvalidRequestError(f'Unknown share type: {share_type}') from exc


def _resolve_share_paths(owner: 'User', paths: Iterable[str]) -> list[str]:
    """Resolve requested paths to unique storage-relative paths.

    Order of first appearance is kept.
    """
    root = sandbox_root(owner)
    storage_paths: list[str] = []
    for relative_path in paths:
        target = resolve(root, relative_path, provision=False)
        if target.is_symlink():
            raise ForbiddenError('Symbolic link detected')
        if not target.exists():
            raise InvalidRequestError(f'Invalid path included: {relative_path}')
        storage_path = to_storage_relative(target)
        if storage_path not in storage_paths:
            storage_paths.append(storage_path)

    if not storage_paths:
        raise InvalidRequestError('A share requires at least one path')
    return storage_paths


def _validate_direct_link(storage_paths: list[str], password: str) -> None:
    if password.strip():
        raise InvalidRequestError('Direct link share cannot include password')
    if len(storage_paths) != 1:
        raise InvalidRequestError('Direct link share can only be used for one file')
    if not from_storage_relative(storage_paths[0]).is_file():
        raise InvalidRequestError('Direct link share must point to a file')


def _load_recipients(recipient_ids: list[int]) -> list['User']:
    users = list(get_user_model().objects.filter(pk__in=recipient_ids))
    found = {user.pk for user in users}
    missing = [pk for pk in recipient_ids if pk not in found]
    if missing:
        raise InvalidRequestError(f'Unknown recipients: {missing}')
    return users
