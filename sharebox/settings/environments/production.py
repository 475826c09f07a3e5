"""Settings used in production."""

from sharebox.settings.components import config

SECRET_KEY = config('DJANGO_SECRET_KEY')

DEBUG = False

SESSION_COOKIE_SECURE = True

CSRF_COOKIE_SECURE = True
