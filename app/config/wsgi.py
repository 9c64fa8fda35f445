"""
WSGI config for the Django application.

The service is normally run under ASGI (config.asgi) because the presence
WebSocket needs it. This WSGI callable serves the HTTP API alone, for
deployments that put the WebSocket on a separate process.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
