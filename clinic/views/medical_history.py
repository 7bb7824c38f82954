"""
Medical history endpoints.

Staff read the aggregated history of every active patient; a patient
reads only their own through the ``patient/<patient_id>`` route.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsStaffRole, PatientRecordScope, require_role
from clinic.roles import ADMIN, PATIENT, PHYSICIAN
from clinic.services.history import all_histories, patient_history


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def medical_history(request):
    return Response(all_histories())


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_role(ADMIN, PHYSICIAN, PATIENT), PatientRecordScope])
def patient_medical_history(request, patient_id: int):
    history = patient_history(patient_id)
    if history is None:
        raise NotFound('Paciente no encontrado')
    return Response(history)
