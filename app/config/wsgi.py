"""
WSGI config for the chat backend.

Provided as a fallback for HTTP-only deployments. Realtime delivery needs
the ASGI entry point in ``config.asgi``.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
