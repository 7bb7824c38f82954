from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import MedicalCondition
from clinic.permissions import IsStaffRole
from clinic.serializers.catalog import CatalogItemSerializer


def _serialize(c: MedicalCondition) -> dict:
    return {'id': c.id, 'name': c.name, 'description': c.description}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def conditions(request):
    if request.method == 'GET':
        return Response([_serialize(c) for c in MedicalCondition.objects.order_by('id')])
    s = CatalogItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = MedicalCondition.objects.create(
        name=s.validated_data['name'], description=s.validated_data.get('description') or '',
    )
    return Response(_serialize(c), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def condition_detail(request, condition_id: int):
    c = MedicalCondition.objects.filter(id=condition_id).first()
    if c is None:
        raise NotFound('Condición médica no encontrada')
    if request.method == 'GET':
        return Response(_serialize(c))
    if request.method == 'DELETE':
        c.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = CatalogItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c.name = s.validated_data['name']
    c.description = s.validated_data.get('description') or ''
    c.save()
    return Response(_serialize(c))
