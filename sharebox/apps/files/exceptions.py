"""Exceptions for files app.

Every failure raised by the storage and sharing logic belongs to one
:class:`ErrorKind`. The HTTP layer maps kinds to status codes, so the
logic never deals with HTTP directly.
"""

import enum
from typing import ClassVar, final


class ErrorKind(enum.Enum):
    """Category of a storage or sharing failure."""

    INVALID_PATH = 'invalid_path'
    INVALID_REQUEST = 'invalid_request'
    NOT_FOUND = 'not_found'
    FORBIDDEN = 'forbidden'
    UNAUTHORIZED = 'unauthorized'
    IO_FAILURE = 'io_failure'


class FileAccessError(Exception):
    """Base class for all storage and sharing failures."""

    kind: ClassVar[ErrorKind]

    def __init__(self, detail: str) -> None:
        """Initialize FileAccessError.

        Args:
            detail: Human readable reason, safe to show to the client.
        """
        self.detail = detail
        super().__init__(detail)


@final
class InvalidPathError(FileAccessError):
    """Raised for traversal, absolute or otherwise malformed paths.

    Always raised before any filesystem mutation.
    """

    kind = ErrorKind.INVALID_PATH


@final
class InvalidRequestError(FileAccessError):
    """Raised when request data fails validation (e.g. share invariants)."""

    kind = ErrorKind.INVALID_REQUEST


@final
class NotFoundError(FileAccessError):
    """Raised for missing files, directories and unknown shares."""

    kind = ErrorKind.NOT_FOUND


@final
class ForbiddenError(FileAccessError):
    """Raised when a path leaves its root, is a symlink, or access is denied."""

    kind = ErrorKind.FORBIDDEN


@final
class UnauthorizedError(FileAccessError):
    """Raised for a wrong or missing share password or a missing identity."""

    kind = ErrorKind.UNAUTHORIZED


@final
class StorageIOError(FileAccessError):
    """Raised when the underlying storage fails during read or write."""

    kind = ErrorKind.IO_FAILURE
