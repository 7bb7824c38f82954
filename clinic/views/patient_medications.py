"""
Patient/medication associations (prescriptions).
"""
from __future__ import annotations

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor, Medication, Patient, PatientMedication
from clinic.permissions import IsStaffRole, PatientRecordScope, require_role
from clinic.roles import ADMIN, PATIENT, PHYSICIAN
from clinic.serializers.association import PatientMedicationCreateSerializer, PatientMedicationUpdateSerializer
from ._scope import scoped_patient_filter


def _serialize(pm: PatientMedication) -> dict:
    doctor = pm.doctor
    return {
        'patient_id': pm.patient_id,
        'medication_id': pm.medication_id,
        'name': pm.medication.name,
        'description': pm.medication.description,
        'prescribed_on': pm.prescribed_on.isoformat() if pm.prescribed_on else None,
        'dosage': pm.dosage,
        'frequency': pm.frequency,
        'notes': pm.notes,
        'doctor': ({'id': doctor.id, 'name': doctor.user.username if doctor.user else None}
                   if doctor else None),
    }


def _doctor_or_400(doctor_id: int) -> Doctor:
    doctor = Doctor.objects.filter(id=doctor_id).first()
    if doctor is None:
        raise ValidationError('Médico no encontrado')
    return doctor


def _load(patient_id: int, medication_id: int) -> PatientMedication:
    pm = (PatientMedication.objects.select_related('medication', 'doctor__user')
          .filter(patient_id=patient_id, medication_id=medication_id).first())
    if pm is None:
        raise NotFound('Asignación no encontrada')
    return pm


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_role(ADMIN, PHYSICIAN, PATIENT), PatientRecordScope])
def patient_medications(request):
    if request.method == 'GET':
        qs = (PatientMedication.objects
              .select_related('patient__user', 'medication', 'doctor__user')
              .filter(**scoped_patient_filter(request))
              .order_by('patient__user__username', 'patient_id', 'medication__name'))
        grouped: dict[int, dict] = {}
        for pm in qs:
            entry = grouped.setdefault(pm.patient_id, {
                'patient_id': pm.patient_id,
                'patient_name': pm.patient.user.username,
                'medications': [],
            })
            entry['medications'].append(_serialize(pm))
        return Response(list(grouped.values()))

    # prescribing is staff only
    if not IsStaffRole().has_permission(request, None):
        raise PermissionDenied(IsStaffRole.message)
    s = PatientMedicationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    try:
        with transaction.atomic():
            if not Patient.objects.filter(id=v['patient_id']).exists():
                raise ValidationError('Paciente no encontrado')
            if not Medication.objects.filter(id=v['medication_id']).exists():
                raise ValidationError('Medicamento no encontrado')
            if PatientMedication.objects.filter(patient_id=v['patient_id'], medication_id=v['medication_id']).exists():
                raise ValidationError('El paciente ya tiene este medicamento asignado')
            PatientMedication.objects.create(
                patient_id=v['patient_id'],
                medication_id=v['medication_id'],
                doctor=_doctor_or_400(v['doctor_id']),
                prescribed_on=v.get('prescribed_on'),
                dosage=v.get('dosage') or '',
                frequency=v.get('frequency') or '',
                notes=v.get('notes') or '',
            )
    except IntegrityError:
        raise ValidationError('El paciente ya tiene este medicamento asignado')
    return Response(_serialize(_load(v['patient_id'], v['medication_id'])), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_medication_detail(request, patient_id: int, medication_id: int):
    pm = _load(patient_id, medication_id)
    if request.method == 'DELETE':
        pm.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = PatientMedicationUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if 'doctor_id' in v:
        pm.doctor = _doctor_or_400(v['doctor_id'])
    for field in ('prescribed_on', 'dosage', 'frequency', 'notes'):
        if field in v:
            value = v[field]
            setattr(pm, field, value if field == 'prescribed_on' else (value or ''))
    pm.save()
    return Response(_serialize(_load(patient_id, medication_id)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def prescriber_options(request):
    qs = Doctor.objects.select_related('user').filter(user__isnull=False).order_by('user__username')
    return Response([{'id': d.id, 'name': d.user.username} for d in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def medication_options(request):
    return Response([{'id': m.id, 'name': m.name} for m in Medication.objects.order_by('name', 'id')])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_options(request):
    qs = Patient.objects.select_related('user').filter(user__is_active=True).order_by('user__username')
    return Response([{'id': p.id, 'name': p.user.username} for p in qs])
