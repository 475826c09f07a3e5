"""Settings used during local development and tests."""

SECRET_KEY = 'django-insecure-development-only-key'  # noqa: S105

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', 'testserver']
