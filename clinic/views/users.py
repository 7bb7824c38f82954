"""
User administration endpoints (administrators only).
"""
from __future__ import annotations

import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Role, User
from clinic.permissions import IsAdminRole
from clinic.serializers.user import UserCreateSerializer, UserUpdateSerializer
from clinic.services.audit import audit

logger = logging.getLogger(__name__)


def _serialize(u: User) -> dict:
    return {
        'id': u.id,
        'name': u.username,
        'email': u.email,
        'active': u.is_active,
        'role_id': u.role_id,
        'role': u.role.name if u.role else None,
    }


def _role_or_400(role_id: int) -> Role:
    role = Role.objects.filter(id=role_id).first()
    if role is None:
        raise ValidationError('Rol no encontrado')
    return role


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def users(request):
    if request.method == 'GET':
        qs = User.objects.select_related('role').order_by('id')
        return Response([_serialize(u) for u in qs])

    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    with transaction.atomic():
        role = _role_or_400(v['role_id'])
        if User.objects.filter(email__iexact=v['email']).exists():
            raise ValidationError('El email ya está registrado')
        if User.objects.filter(username=v['name']).exists():
            raise ValidationError('El nombre de usuario ya existe')
        user = User.objects.create_user(
            username=v['name'], email=v['email'], password=v['password'], role=role, is_active=v['active'],
        )
    audit(request, 'user_create', user, role=role.name)
    return Response({'success': True, 'user': _serialize(user)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, user_id: int):
    user = User.objects.select_related('role').filter(id=user_id).first()
    if user is None:
        raise NotFound('Usuario no encontrado')

    if request.method == 'DELETE':
        if user.pk == request.user.pk:
            raise ValidationError('No puedes eliminar tu propia cuenta')
        audit(request, 'user_delete', user)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    s = UserUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    with transaction.atomic():
        role = _role_or_400(v['role_id'])
        if User.objects.filter(email__iexact=v['email']).exclude(id=user.id).exists():
            raise ValidationError('El email ya está registrado')
        if User.objects.filter(username=v['name']).exclude(id=user.id).exists():
            raise ValidationError('El nombre de usuario ya existe')
        user.username = v['name']
        user.email = v['email']
        user.role = role
        user.is_active = v['active']
        if v.get('password'):
            user.set_password(v['password'])
        user.save()
    audit(request, 'user_update', user, password_changed=bool(v.get('password')))
    return Response({'success': True, 'user': _serialize(user)})
