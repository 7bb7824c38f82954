import logging

from django.conf import settings
from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler as drf_exception_handler, set_rollback

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = 'Error en el servidor'


def _first_message(detail) -> str:
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _first_message(detail['detail'])
        for key, value in detail.items():
            if key == api_settings.NON_FIELD_ERRORS_KEY:
                return _first_message(value)
            return f"{key}: {_first_message(value)}"
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request')
        logger.exception("Unhandled error on %s %s", getattr(request, 'method', '-'), getattr(request, 'path', '-'))
        set_rollback()
        payload = {'success': False, 'error': SERVER_ERROR_MESSAGE}
        if settings.EXPOSE_ERROR_DETAILS:
            payload['details'] = str(exc)
        if isinstance(exc, DatabaseError):
            payload['error'] = 'Error de base de datos'
        return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # normalize response
    if isinstance(exc, exceptions.NotAuthenticated):
        message = 'Token no proporcionado'
    else:
        message = _first_message(resp.data)
    payload = {'success': False, 'error': message}
    if isinstance(exc, exceptions.ValidationError) and isinstance(resp.data, dict):
        payload['fields'] = resp.data
    return Response(payload, status=resp.status_code, headers=_auth_headers(resp))


def _auth_headers(resp):
    headers = {}
    for name in ('WWW-Authenticate', 'Retry-After'):
        if resp.has_header(name):
            headers[name] = resp[name]
    return headers
