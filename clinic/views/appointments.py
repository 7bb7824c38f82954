"""
Appointment endpoints for staff.

Listings only include appointments whose patient and doctor accounts are
active.  Creating or re-pointing an appointment checks the same rule.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Appointment, Doctor, Patient
from clinic.permissions import IsStaffRole
from clinic.serializers.appointment import AppointmentCreateSerializer, AppointmentUpdateSerializer


def _serialize(a: Appointment) -> dict:
    return {
        'id': a.id,
        'patient_id': a.patient_id,
        'patient_name': a.patient.user.username,
        'doctor_id': a.doctor_id,
        'doctor_name': a.doctor.user.username if a.doctor.user else None,
        'specialty': a.doctor.specialty,
        'scheduled_at': a.scheduled_at.isoformat(),
        'reason': a.reason,
        'status': a.status,
    }


def _active_patient(patient_id: int) -> Patient:
    p = Patient.objects.filter(id=patient_id, user__is_active=True).first()
    if p is None:
        raise ValidationError('Paciente no existe o está inactivo')
    return p


def _active_doctor(doctor_id: int) -> Doctor:
    d = Doctor.objects.filter(id=doctor_id, user__is_active=True).first()
    if d is None:
        raise ValidationError('Médico no existe o está inactivo')
    return d


def _load(appointment_id: int) -> Appointment:
    a = Appointment.objects.select_related('patient__user', 'doctor__user').filter(id=appointment_id).first()
    if a is None:
        raise NotFound('Cita no encontrada')
    return a


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointments(request):
    if request.method == 'GET':
        qs = (Appointment.objects
              .select_related('patient__user', 'doctor__user')
              .filter(patient__user__is_active=True, doctor__user__is_active=True)
              .order_by('-scheduled_at', '-id'))
        return Response([_serialize(a) for a in qs])

    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    with transaction.atomic():
        patient = _active_patient(v['patient_id'])
        doctor = _active_doctor(v['doctor_id'])
        a = Appointment.objects.create(
            patient=patient, doctor=doctor, scheduled_at=v['scheduled_at'],
            reason=v.get('reason', ''), status=v.get('status', Appointment.STATUS_SCHEDULED),
        )
    return Response(_serialize(_load(a.id)), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_detail(request, appointment_id: int):
    if request.method == 'GET':
        return Response(_serialize(_load(appointment_id)))
    if request.method == 'DELETE':
        deleted, _ = Appointment.objects.filter(id=appointment_id).delete()
        if not deleted:
            raise NotFound('Cita no encontrada')
        return Response(status=status.HTTP_204_NO_CONTENT)

    s = AppointmentUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    with transaction.atomic():
        a = _load(appointment_id)
        if 'patient_id' in v:
            a.patient = _active_patient(v['patient_id'])
        if 'doctor_id' in v:
            a.doctor = _active_doctor(v['doctor_id'])
        for field in ('scheduled_at', 'reason', 'status'):
            if field in v:
                setattr(a, field, v[field])
        a.save()
    return Response(_serialize(_load(appointment_id)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_patient_options(request):
    qs = Patient.objects.select_related('user').filter(user__is_active=True).order_by('user__username')
    return Response([{'id': p.id, 'name': p.user.username} for p in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_doctor_options(request):
    qs = Doctor.objects.select_related('user').filter(user__is_active=True).order_by('user__username')
    return Response([{'id': d.id, 'name': d.user.username, 'specialty': d.specialty} for d in qs])
