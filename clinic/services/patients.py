"""
Patient profile writes, mirrored to FHIR after the local commit.
"""
from __future__ import annotations

import logging

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic.models import Patient, User
from clinic.roles import PATIENT, role_for_user
from clinic.services import fhir

logger = logging.getLogger(__name__)

PATIENT_FIELDS = ('identification_number', 'birth_date', 'phone', 'address', 'gender')


def serialize_patient(p: Patient) -> dict:
    user = p.user
    return {
        'id': p.id,
        'user_id': user.id,
        'name': user.username,
        'email': user.email,
        'active': user.is_active,
        'identification_number': p.identification_number,
        'birth_date': p.birth_date.isoformat() if p.birth_date else None,
        'phone': p.phone,
        'address': p.address,
        'gender': p.gender,
        'fhir_id': p.fhir_id,
    }


def list_patients():
    qs = Patient.objects.select_related('user').order_by('id')
    return [serialize_patient(p) for p in qs]


def create_patient(*, user_id: int, **fields) -> Patient:
    with transaction.atomic():
        user = User.objects.select_related('role').filter(id=user_id).first()
        if user is None or role_for_user(user) != PATIENT:
            raise ValidationError('El usuario no tiene rol de paciente')
        if Patient.objects.filter(user_id=user_id).exists():
            raise ValidationError('El usuario ya tiene un perfil de paciente')
        values = {k: (fields.get(k) or '') for k in PATIENT_FIELDS if k != 'birth_date'}
        patient = Patient.objects.create(user=user, birth_date=fields.get('birth_date'), **values)
    logger.info("Patient %s created for user %s", patient.pk, user_id)
    fhir.sync_patient(patient)
    return patient


def update_patient(patient_id: int, **fields) -> Patient:
    with transaction.atomic():
        patient = Patient.objects.select_for_update().select_related('user').filter(id=patient_id).first()
        if patient is None:
            raise NotFound('Paciente no encontrado')
        changed = []
        for k in PATIENT_FIELDS:
            if k in fields:
                value = fields[k]
                if k != 'birth_date':
                    value = value or ''
                setattr(patient, k, value)
                changed.append(k)
        if changed:
            patient.save(update_fields=changed)
    fhir.sync_patient(patient)
    return patient


def delete_patient(patient_id: int) -> None:
    with transaction.atomic():
        patient = Patient.objects.filter(id=patient_id).first()
        if patient is None:
            raise NotFound('Paciente no encontrado')
        fhir_id = patient.fhir_id
        patient.delete()
    logger.info("Patient %s deleted", patient_id)
    fhir.unsync_patient(fhir_id)
