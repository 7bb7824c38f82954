"""
ASGI config for the hospital records project.

Requests run to completion one at a time per worker; there are no
WebSocket routes, so the plain Django ASGI handler is enough.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hospital_records.settings")

application = get_asgi_application()
