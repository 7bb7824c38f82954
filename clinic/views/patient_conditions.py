"""
Patient/condition associations.

Each pair (patient, condition) exists at most once; the diagnosing
doctor, date and notes live on the association row.
"""
from __future__ import annotations

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor, MedicalCondition, Patient, PatientCondition
from clinic.permissions import IsStaffRole, PatientRecordScope, require_role
from clinic.roles import ADMIN, PATIENT, PHYSICIAN
from clinic.serializers.association import PatientConditionCreateSerializer, PatientConditionUpdateSerializer
from ._scope import scoped_patient_filter


def _serialize(pc: PatientCondition) -> dict:
    doctor = pc.doctor
    return {
        'patient_id': pc.patient_id,
        'condition_id': pc.condition_id,
        'name': pc.condition.name,
        'description': pc.condition.description,
        'diagnosed_on': pc.diagnosed_on.isoformat() if pc.diagnosed_on else None,
        'notes': pc.notes,
        'doctor': {
            'id': doctor.id,
            'name': doctor.user.username if doctor.user else None,
        } if doctor else None,
    }


def _doctor_or_400(doctor_id):
    if doctor_id is None:
        return None
    doctor = Doctor.objects.filter(id=doctor_id).first()
    if doctor is None:
        raise ValidationError('Médico no encontrado')
    return doctor


def _load(patient_id: int, condition_id: int) -> PatientCondition:
    pc = (PatientCondition.objects.select_related('condition', 'doctor__user')
          .filter(patient_id=patient_id, condition_id=condition_id).first())
    if pc is None:
        raise NotFound('Asociación no encontrada')
    return pc


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_role(ADMIN, PHYSICIAN, PATIENT), PatientRecordScope])
def patients_with_conditions(request):
    """Conditions grouped per patient, ordered by patient name."""
    qs = (PatientCondition.objects
          .select_related('patient__user', 'condition', 'doctor__user')
          .filter(**scoped_patient_filter(request))
          .order_by('patient__user__username', 'patient_id', 'condition__name'))
    grouped: dict[int, dict] = {}
    for pc in qs:
        entry = grouped.setdefault(pc.patient_id, {
            'patient_id': pc.patient_id,
            'patient_name': pc.patient.user.username,
            'conditions': [],
        })
        entry['conditions'].append(_serialize(pc))
    return Response(list(grouped.values()))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def create_patient_condition(request):
    s = PatientConditionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    try:
        with transaction.atomic():
            if not Patient.objects.filter(id=v['patient_id']).exists():
                raise ValidationError('Paciente no encontrado')
            if not MedicalCondition.objects.filter(id=v['condition_id']).exists():
                raise ValidationError('Condición médica no encontrada')
            if PatientCondition.objects.filter(patient_id=v['patient_id'], condition_id=v['condition_id']).exists():
                raise ValidationError('El paciente ya tiene esta condición asignada')
            PatientCondition.objects.create(
                patient_id=v['patient_id'],
                condition_id=v['condition_id'],
                doctor=_doctor_or_400(v.get('doctor_id')),
                diagnosed_on=v.get('diagnosed_on'),
                notes=v.get('notes') or '',
            )
    except IntegrityError:
        raise ValidationError('El paciente ya tiene esta condición asignada')
    return Response(_serialize(_load(v['patient_id'], v['condition_id'])), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_condition_detail(request, patient_id: int, condition_id: int):
    pc = _load(patient_id, condition_id)
    if request.method == 'DELETE':
        pc.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = PatientConditionUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if 'doctor_id' in v:
        pc.doctor = _doctor_or_400(v['doctor_id'])
    if 'diagnosed_on' in v:
        pc.diagnosed_on = v['diagnosed_on']
    if 'notes' in v:
        pc.notes = v['notes'] or ''
    pc.save()
    return Response(_serialize(_load(patient_id, condition_id)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_options(request):
    qs = Patient.objects.select_related('user').order_by('user__username')
    return Response([{'id': p.id, 'name': p.user.username} for p in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def condition_options(request):
    return Response([{'id': c.id, 'name': c.name} for c in MedicalCondition.objects.order_by('name', 'id')])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def doctor_options(request):
    qs = Doctor.objects.select_related('user').filter(user__isnull=False).order_by('user__username')
    return Response([{'id': d.id, 'name': d.user.username, 'specialty': d.specialty} for d in qs])
