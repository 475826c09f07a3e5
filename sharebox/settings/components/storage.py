"""File storage and sharing settings."""

from sharebox.settings.components import BASE_DIR, config

# Every user's sandbox lives at SHAREBOX_STORAGE_ROOT/<username>
SHAREBOX_STORAGE_ROOT = config(
    'SHAREBOX_STORAGE_ROOT',
    default=str(BASE_DIR.joinpath('storage')),
)

# Buffer size for streamed uploads, downloads and archives
SHAREBOX_CHUNK_SIZE = config(
    'SHAREBOX_CHUNK_SIZE',
    cast=int,
    default=64 * 1024,
)

# Swappable capabilities, selected by dotted path
SHAREBOX_PASSWORD_HASHER = config(
    'SHAREBOX_PASSWORD_HASHER',
    default='sharebox.apps.sharing.infrastructure.hashing.DjangoPasswordHasher',
)
SHAREBOX_MIME_DETECTOR = config(
    'SHAREBOX_MIME_DETECTOR',
    default='sharebox.apps.files.infrastructure.mime.MagicMimeDetector',
)
