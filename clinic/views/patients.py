"""
Patient management views.

Staff (administrators and physicians) manage patient profiles.  A
patient may read their own profile through ``by-user``.  Writes are
mirrored to the FHIR server as ``Patient`` resources.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.authentication import get_identity
from clinic.models import Patient
from clinic.permissions import IsStaffRole, PatientRecordScope, require_role
from clinic.roles import ADMIN, PATIENT, PHYSICIAN
from clinic.serializers.patient import PatientCreateSerializer, PatientUpdateSerializer
from clinic.services.patients import (
    create_patient,
    delete_patient,
    list_patients,
    serialize_patient,
    update_patient,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patients(request):
    if request.method == 'GET':
        return Response(list_patients())
    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = create_patient(**s.validated_data)
    return Response(serialize_patient(patient), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_detail(request, pk: int):
    if request.method == 'GET':
        patient = Patient.objects.select_related('user').filter(id=pk).first()
        if patient is None:
            raise NotFound('Paciente no encontrado')
        return Response(serialize_patient(patient))
    if request.method == 'DELETE':
        delete_patient(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = PatientUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    patient = update_patient(pk, **s.validated_data)
    return Response(serialize_patient(patient))


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_role(ADMIN, PHYSICIAN, PATIENT), PatientRecordScope])
def patient_by_user(request, user_id: int):
    """Patient profile owned by a user account."""
    identity = get_identity(request)
    if identity.is_patient and identity.user_id != user_id:
        raise PermissionDenied('No tienes acceso a los datos de otro paciente')
    patient = Patient.objects.select_related('user').filter(user_id=user_id).first()
    if patient is None:
        raise NotFound('Paciente no encontrado')
    return Response(serialize_patient(patient))
