"""
Authentication views.

Login issues a simplejwt refresh/access pair whose access token carries
the caller's ``username``, ``email`` and canonical ``role`` alongside the
``id`` claim.  These views live apart from ``clinic.authentication`` so
that DRF can import the authentication class without pulling in views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.models import User
from clinic.roles import role_for_user
from clinic.serializers.auth import LoginSerializer, LogoutSerializer, RefreshSerializer
from clinic.services.audit import audit, client_ip, log_action

logger = logging.getLogger(__name__)


def _audit_login(user, username: str, result: str, request) -> None:
    try:
        log_action(user=user, action='login', object_type='user', object_id=getattr(user, 'pk', None),
                   detail={'result': result, 'username': username, 'ip': client_ip(request)})
    except Exception:
        logger.exception("Could not record login audit event for %s", username)


def issue_tokens(user: User, role: str) -> RefreshToken:
    refresh = RefreshToken.for_user(user)
    for token in (refresh, refresh.access_token):
        token['username'] = user.username
        token['email'] = user.email
        token['role'] = role
    return refresh


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """Username/password login."""
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    password = s.validated_data['password']

    candidate = User.objects.select_related('role').filter(username=username).first()
    if candidate is None or not candidate.check_password(password):
        logger.info("Failed login for %r", username)
        _audit_login(None, username, 'fail', request)
        raise AuthenticationFailed('Credenciales inválidas')
    if not candidate.is_active:
        _audit_login(candidate, username, 'inactive', request)
        raise AuthenticationFailed('Cuenta desactivada')

    user = authenticate(request, username=username, password=password)
    if user is None:
        raise AuthenticationFailed('Credenciales inválidas')

    role = role_for_user(user)
    if role is None:
        _audit_login(user, username, 'invalid_role', request)
        raise PermissionDenied('Rol de usuario no válido')

    refresh = issue_tokens(user, role)
    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    _audit_login(user, username, 'ok', request)

    return Response({
        'success': True,
        'token': str(refresh.access_token),
        'refresh': str(refresh),
        'user': {
            'id': user.id,
            'name': user.username,
            'email': user.email,
            'role': role,
        },
    })

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Return a new access token from a refresh token."""
    s = RefreshSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        refresh = RefreshToken(s.validated_data['refresh'])
    except TokenError:
        raise AuthenticationFailed('Token de refresco inválido o expirado')
    return Response({'success': True, 'token': str(refresh.access_token)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or all of the caller's tokens."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    raw = s.validated_data.get('refresh')
    count = 0
    if raw:
        try:
            token = RefreshToken(raw)
        except TokenError:
            raise AuthenticationFailed('Token de refresco inválido o expirado')
        if str(token.get('id')) != str(request.user.pk):
            raise PermissionDenied('El token no pertenece al usuario')
        token.blacklist()
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    audit(request, 'logout', request.user, blacklisted=count)
    return Response({'success': True, 'blacklisted': count})


@api_view(['GET'])
@permission_classes([AllowAny])
def status_view(request):
    return Response({'success': True, 'status': 'ok', 'timestamp': timezone.now().isoformat()})
