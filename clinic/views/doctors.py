"""
Doctor endpoints.

Administrators and physicians may list doctors; only administrators may
create, update or delete them.  Writes are mirrored to the FHIR server
as ``Practitioner`` resources once the local change has been committed.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.authentication import get_identity
from clinic.permissions import IsStaffRole
from clinic.roles import ADMIN
from clinic.serializers.doctor import DoctorCreateSerializer, DoctorUpdateSerializer
from clinic.services.doctors import create_doctor, delete_doctor, list_doctors, serialize_doctor, update_doctor


def _require_admin(request):
    identity = get_identity(request)
    if identity is None or identity.role != ADMIN:
        raise PermissionDenied('No tienes permisos para esta acción')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def doctors(request):
    if request.method == 'GET':
        return Response(list_doctors())
    _require_admin(request)
    s = DoctorCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = create_doctor(**s.validated_data)
    return Response(serialize_doctor(doctor), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def doctor_detail(request, doctor_id: int):
    _require_admin(request)
    if request.method == 'DELETE':
        delete_doctor(doctor_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = DoctorUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = update_doctor(doctor_id, specialty=s.validated_data['specialty'])
    return Response(serialize_doctor(doctor))
