"""Database models for sharing app."""

import uuid
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_SHARE_TYPE_MAX_LENGTH: Final = 16
_PASSWORD_MAX_LENGTH: Final = 128  # Django password hash length


class ShareType(models.TextChoices):
    """How a share is accessed.

    INTERNAL: only the listed recipient accounts may download.
    WEBSITE: anyone with the link, optionally password protected.
    DIRECT_LINK: exactly one file, no listing, no password.
    """

    INTERNAL = 'INTERNAL', 'Internal'
    WEBSITE = 'WEBSITE', 'Website'
    DIRECT_LINK = 'DIRECT_LINK', 'Direct link'


@final
class ShareRecord(models.Model):
    """Set of files an owner published under one share URI.

    Files are stored as paths relative to the storage root, prefixed with
    the owner's username: alice/documents/report.pdf

    Records are immutable after creation; invariants per share type are
    enforced by the sharing logic before the record is written.
    """

    # Generated identifier, also the public share URI
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    share_type = models.CharField(
        max_length=_SHARE_TYPE_MAX_LENGTH,
        choices=ShareType.choices,
    )

    # Ordered list of storage-relative paths
    files = models.JSONField(
        default=list,
        help_text='Paths relative to the storage root: {username}/folder/file.ext',
    )

    password = models.CharField(
        max_length=_PASSWORD_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Password hash, only for website shares',
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='shares',
        db_index=True,
    )

    recipients = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='received_shares',
        blank=True,
        help_text='Accounts allowed to download an internal share',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Share'  # type: ignore[mutable-override]
        verbose_name_plural = 'Shares'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['owner', '-created_at'],
                name='shares_owner_recent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner.username}:{self.share_type}:{self.id}'

    @property
    def has_password(self) -> bool:
        """Check whether the share is password protected."""
        return bool(self.password)

    def has_recipient(self, user_id: int) -> bool:
        """Check whether an account is a recipient of this share.

        Args:
            user_id: Account ID to check.

        Returns:
            True if the account may access the internal share.
        """
        return self.recipients.filter(pk=user_id).exists()
