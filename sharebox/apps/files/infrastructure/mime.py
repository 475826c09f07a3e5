"""MIME type detection for served files.

Content types only feed response headers; they never take part in
authorization decisions. The implementation is selected by the
SHAREBOX_MIME_DETECTOR setting.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Final, Protocol, final

import magic
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE: Final = 'application/octet-stream'

# Answers from libmagic that say nothing about the file type
_GENERIC_MIME_TYPES: Final = frozenset((
    DEFAULT_MIME_TYPE,
    'application/x-empty',
    'inode/x-empty',
))


class MimeDetector(Protocol):
    """Maps a file on disk to a content type."""

    def detect(self, path: Path) -> str:
        """Detect the content type of a file."""


@final
class ExtensionMimeDetector:
    """Guess the MIME type from the filename extension only."""

    def detect(self, path: Path) -> str:
        """Detect MIME type from filename.

        Args:
            path: Path of the file.

        Returns:
            MIME type string (e.g., 'image/jpeg', 'application/pdf').
            Returns 'application/octet-stream' if type cannot be determined.
        """
        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type is None:
            return DEFAULT_MIME_TYPE
        return mime_type


@final
class MagicMimeDetector:
    """Sniff the MIME type from file contents with libmagic.

    When libmagic only reports a generic type (empty or unrecognized
    binary content) the extension-based guess is used instead.
    """

    def __init__(self) -> None:
        """Initialize detector."""
        self._fallback = ExtensionMimeDetector()

    def detect(self, path: Path) -> str:
        """Detect MIME type from file contents.

        Args:
            path: Path of an existing regular file.

        Returns:
            MIME type string.
        """
        try:
            mime_type = magic.from_file(str(path), mime=True)
        except magic.MagicException:
            logger.warning('libmagic failed to inspect file: %s', path)
            return self._fallback.detect(path)

        if not mime_type or mime_type in _GENERIC_MIME_TYPES:
            return self._fallback.detect(path)
        return mime_type


def get_mime_detector() -> MimeDetector:
    """Instantiate the configured MIME detector.

    Returns:
        MimeDetector selected by SHAREBOX_MIME_DETECTOR.
    """
    detector_class = import_string(settings.SHAREBOX_MIME_DETECTOR)
    return detector_class()
