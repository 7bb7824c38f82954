"""
Doctor profile writes.

Each write checks the referenced user inside a transaction, commits the
local row and only then mirrors it to the FHIR server.
"""
from __future__ import annotations

import logging

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic.models import Appointment, Doctor, User
from clinic.roles import PHYSICIAN, role_for_user
from clinic.services import fhir

logger = logging.getLogger(__name__)


def serialize_doctor(d: Doctor) -> dict:
    user = d.user
    return {
        'id': d.id,
        'user_id': user.id if user else None,
        'specialty': d.specialty,
        'fhir_id': d.fhir_id,
        'user': {'id': user.id, 'name': user.username, 'email': user.email} if user else None,
    }


def list_doctors():
    qs = Doctor.objects.select_related('user').order_by('id')
    return [serialize_doctor(d) for d in qs]


def create_doctor(*, user_id: int, specialty: str) -> Doctor:
    with transaction.atomic():
        user = User.objects.select_related('role').filter(id=user_id).first()
        if user is None or role_for_user(user) != PHYSICIAN:
            raise ValidationError('El usuario no tiene rol de médico')
        if Doctor.objects.filter(user_id=user_id).exists():
            raise ValidationError('El usuario ya tiene un perfil de médico')
        doctor = Doctor.objects.create(user=user, specialty=specialty)
    logger.info("Doctor %s created for user %s", doctor.pk, user_id)
    fhir.sync_doctor(doctor)
    return doctor


def update_doctor(doctor_id: int, *, specialty: str) -> Doctor:
    with transaction.atomic():
        doctor = Doctor.objects.select_for_update().select_related('user').filter(id=doctor_id).first()
        if doctor is None:
            raise NotFound('Médico no encontrado')
        doctor.specialty = specialty
        doctor.save(update_fields=['specialty'])
    fhir.sync_doctor(doctor)
    return doctor


def delete_doctor(doctor_id: int) -> None:
    with transaction.atomic():
        doctor = Doctor.objects.filter(id=doctor_id).first()
        if doctor is None:
            raise NotFound('Médico no encontrado')
        if Appointment.objects.filter(doctor_id=doctor.id).exists():
            raise ValidationError('El médico tiene citas asignadas')
        fhir_id = doctor.fhir_id
        doctor.delete()
    logger.info("Doctor %s deleted", doctor_id)
    fhir.unsync_doctor(fhir_id)
