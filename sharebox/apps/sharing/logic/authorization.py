"""Access decisions for shares.

Decisions are plain values; nothing here raises on denial. Callers turn a
denial into the matching error with :func:`ensure_allowed`.

| share type  | list                   | download                      |
|-------------|------------------------|-------------------------------|
| INTERNAL    | allowed                | requester is a recipient      |
| WEBSITE     | password matches/unset | password matches/unset        |
| DIRECT_LINK | never (not found)      | always                        |
"""

import enum
import logging
import uuid
from typing import TYPE_CHECKING

from sharebox.apps.files.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from sharebox.apps.sharing.infrastructure.hashing import (
    PasswordHasher,
    get_password_hasher,
)
from sharebox.apps.sharing.models import ShareRecord, ShareType

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)


class AccessDecision(enum.Enum):
    """Outcome of an access check."""

    ALLOWED = 'allowed'
    NOT_FOUND = 'not_found'
    UNAUTHORIZED = 'unauthorized'
    FORBIDDEN = 'forbidden'


def authorize_list(
    share: ShareRecord,
    password: str = '',
    hasher: PasswordHasher | None = None,
) -> AccessDecision:
    """Decide whether the files of a share may be listed.

    Args:
        share: Share being accessed.
        password: Password supplied by the visitor (may be blank).
        hasher: Password hasher; the configured one by default.

    Returns:
        AccessDecision for the listing.
    """
    if share.share_type == ShareType.DIRECT_LINK:
        # Direct links expose their single file only through the fetch path
        return AccessDecision.NOT_FOUND

    if share.share_type == ShareType.WEBSITE:
        return _check_password(share, password, hasher)

    return AccessDecision.ALLOWED


def authorize_download(
    share: ShareRecord,
    user: 'User | None',
    password: str = '',
    hasher: PasswordHasher | None = None,
) -> AccessDecision:
    """Decide whether files of a share may be downloaded.

    Args:
        share: Share being accessed.
        user: Authenticated requester, None for anonymous requests.
        password: Password supplied by the visitor (may be blank).
        hasher: Password hasher; the configured one by default.

    Returns:
        AccessDecision for the download.
    """
    if share.share_type == ShareType.DIRECT_LINK:
        return AccessDecision.ALLOWED

    if share.share_type == ShareType.WEBSITE:
        return _check_password(share, password, hasher)

    if user is None:
        return AccessDecision.UNAUTHORIZED

    if not share.has_recipient(user.pk):
        logger.warning(
            'User %s is not a recipient of share %s',
            user.get_username(),
            share.id,
        )
        return AccessDecision.FORBIDDEN

    return AccessDecision.ALLOWED


def ensure_allowed(decision: AccessDecision, share_uri: uuid.UUID) -> None:
    """Turn a denial into the matching error.

    Args:
        decision: Result of an access check.
        share_uri: Share the decision is about.

    Raises:
        NotFoundError: For NOT_FOUND.
        UnauthorizedError: For UNAUTHORIZED.
        ForbiddenError: For FORBIDDEN.
    """
    if decision == AccessDecision.NOT_FOUND:
        raise NotFoundError(f'Share not found: {share_uri}')
    if decision == AccessDecision.UNAUTHORIZED:
        raise UnauthorizedError('Invalid password or missing credentials')
    if decision == AccessDecision.FORBIDDEN:
        raise ForbiddenError("You don't have access to this share")


def _check_password(
    share: ShareRecord,
    password: str,
    hasher: PasswordHasher | None,
) -> AccessDecision:
    if not share.has_password:
        return AccessDecision.ALLOWED

    hasher = hasher or get_password_hasher()
    if hasher.matches(password or '', share.password):
        return AccessDecision.ALLOWED

    logger.warning('Invalid password for share %s', share.id)
    return AccessDecision.UNAUTHORIZED
