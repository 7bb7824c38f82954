from django.db import IntegrityError
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Role
from clinic.permissions import IsAdminRole
from clinic.serializers.user import RoleSerializer


def _serialize(r: Role) -> dict:
    return {'id': r.id, 'name': r.name, 'description': r.description, 'users': r.users.count()}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def roles(request):
    if request.method == 'GET':
        return Response([_serialize(r) for r in Role.objects.all()])
    s = RoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    if Role.objects.filter(name__iexact=s.validated_data['name']).exists():
        raise ValidationError('El rol ya existe')
    role = Role.objects.create(**s.validated_data)
    return Response({'success': True, 'role': _serialize(role)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def role_detail(request, role_id: int):
    role = Role.objects.filter(id=role_id).first()
    if role is None:
        raise NotFound('Rol no encontrado')
    if request.method == 'DELETE':
        if role.users.exists():
            raise ValidationError('No se puede eliminar un rol asignado a usuarios')
        role.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    s = RoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    role.name = s.validated_data['name']
    role.description = s.validated_data.get('description', role.description)
    try:
        role.save()
    except IntegrityError:
        raise ValidationError('El rol ya existe')
    return Response({'success': True, 'role': _serialize(role)})
