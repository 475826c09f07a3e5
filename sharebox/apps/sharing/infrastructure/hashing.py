"""One-way hashing of share passwords.

The implementation is selected by the SHAREBOX_PASSWORD_HASHER setting.
"""

from typing import Protocol, final

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.utils.module_loading import import_string


class PasswordHasher(Protocol):
    """Hash and verify share passwords."""

    def encode(self, plaintext: str) -> str:
        """Hash a plaintext password."""

    def matches(self, plaintext: str, hashed: str) -> bool:
        """Check a plaintext password against a stored hash."""


@final
class DjangoPasswordHasher:
    """Hash share passwords with Django's configured PASSWORD_HASHERS."""

    def encode(self, plaintext: str) -> str:
        """Hash a plaintext password.

        Args:
            plaintext: Password as typed by the share owner.

        Returns:
            Encoded hash including algorithm and salt.
        """
        return make_password(plaintext)

    def matches(self, plaintext: str, hashed: str) -> bool:
        """Check a plaintext password against a stored hash.

        Args:
            plaintext: Password supplied by the visitor.
            hashed: Hash stored on the share.

        Returns:
            True if the password matches. Blank passwords never match.
        """
        if not plaintext or not hashed:
            return False
        return check_password(plaintext, hashed)


def get_password_hasher() -> PasswordHasher:
    """Instantiate the configured password hasher.

    Returns:
        PasswordHasher selected by SHAREBOX_PASSWORD_HASHER.
    """
    hasher_class = import_string(settings.SHAREBOX_PASSWORD_HASHER)
    return hasher_class()
