"""ASGI config for the guestlist project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "guestlist.settings")

application = get_asgi_application()
