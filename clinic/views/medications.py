from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Medication
from clinic.permissions import IsStaffRole
from clinic.serializers.catalog import CatalogItemSerializer


def _serialize(m: Medication) -> dict:
    return {'id': m.id, 'name': m.name, 'description': m.description}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def medications(request):
    if request.method == 'GET':
        return Response([_serialize(m) for m in Medication.objects.order_by('id')])
    s = CatalogItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    m = Medication.objects.create(
        name=s.validated_data['name'], description=s.validated_data.get('description') or '',
    )
    return Response(_serialize(m), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def medication_detail(request, medication_id: int):
    m = Medication.objects.filter(id=medication_id).first()
    if m is None:
        raise NotFound('Medicamento no encontrado')
    if request.method == 'GET':
        return Response(_serialize(m))
    if request.method == 'DELETE':
        m.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = CatalogItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    m.name = s.validated_data['name']
    m.description = s.validated_data.get('description') or ''
    m.save()
    return Response(_serialize(m))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def medication_options(request):
    """Pick-list of medications ordered by name."""
    return Response([{'id': m.id, 'name': m.name} for m in Medication.objects.order_by('name', 'id')])
