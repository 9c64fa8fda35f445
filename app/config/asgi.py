"""
ASGI config for the Django application.

This file exposes the ASGI callable as a module-level variable named
`application`. It serves:
- HTTP requests via Django
- The presence WebSocket via Django Channels

WebSocket clients authenticate with the identity provider's JWT, passed
either as the `token` query parameter or as the second entry of the
Sec-WebSocket-Protocol header (["jwt", <token>]).

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

# Set the default Django settings module for the ASGI application
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Initialize Django ASGI application early to ensure settings are loaded
# before importing any models or other Django components
django_asgi_app = get_asgi_application()

# Import Channels components after Django is initialized
from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.security.websocket import AllowedHostsOriginValidator  # noqa: E402

from chat.middleware import IdentityAuthMiddleware  # noqa: E402
from chat.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        # Origin check, then identity resolution, then routing to the consumer
        "websocket": AllowedHostsOriginValidator(
            IdentityAuthMiddleware(URLRouter(websocket_urlpatterns))
        ),
    }
)
