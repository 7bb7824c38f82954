import logging

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(request):
    """Liveness probe; checks that the default database answers ``SELECT 1``."""
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        logger.error("Health check failed: %s", e)
        payload = {'ok': False, 'db': False}
        if settings.EXPOSE_ERROR_DETAILS:
            payload['details'] = str(e)
        return JsonResponse(payload, status=500)
    return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1)})
