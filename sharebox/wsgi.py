"""WSGI entry point for the sharebox project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'sharebox.settings')

application = get_wsgi_application()
