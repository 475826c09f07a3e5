"""Settings for the bundled WSGI server command."""

from sharebox.settings.components import config

SHAREBOX_HOST = config('SHAREBOX_HOST', default='0.0.0.0')  # noqa: S104
SHAREBOX_PORT = config('SHAREBOX_PORT', cast=int, default=8000)
SHAREBOX_THREADS = config('SHAREBOX_THREADS', cast=int, default=10)
