"""
Medical history aggregation.

Per patient: appointments (newest first), diagnosed conditions and
prescribed medications, each with the responsible doctor when known.
"""
from __future__ import annotations

from django.db.models import Prefetch

from clinic.models import Appointment, Patient, PatientCondition, PatientMedication


def _doctor_ref(doctor) -> dict | None:
    if doctor is None or doctor.user is None:
        return None
    return {'id': doctor.id, 'name': doctor.user.username, 'specialty': doctor.specialty}


def _iso(value):
    return value.isoformat() if value else None


def _history_queryset():
    return Patient.objects.select_related('user').prefetch_related(
        Prefetch('appointments',
                 queryset=Appointment.objects.select_related('doctor__user').order_by('-scheduled_at')),
        Prefetch('conditions',
                 queryset=PatientCondition.objects.select_related('condition', 'doctor__user')
                 .order_by('-diagnosed_on', 'id')),
        Prefetch('medications',
                 queryset=PatientMedication.objects.select_related('medication', 'doctor__user')
                 .order_by('-prescribed_on', 'id')),
    )


def build_history(p: Patient) -> dict:
    return {
        'patient_id': p.id,
        'patient_name': p.user.username,
        'birth_date': _iso(p.birth_date),
        'gender': p.gender,
        'phone': p.phone,
        'address': p.address,
        'appointments': [{
            'id': a.id,
            'scheduled_at': _iso(a.scheduled_at),
            'reason': a.reason,
            'status': a.status,
            'doctor': _doctor_ref(a.doctor),
        } for a in p.appointments.all()],
        'conditions': [{
            'id': pc.condition.id,
            'name': pc.condition.name,
            'description': pc.condition.description,
            'diagnosed_on': _iso(pc.diagnosed_on),
            'notes': pc.notes,
            'doctor': _doctor_ref(pc.doctor),
        } for pc in p.conditions.all()],
        'medications': [{
            'id': pm.id,
            'medication': {
                'id': pm.medication.id,
                'name': pm.medication.name,
                'description': pm.medication.description,
            },
            'prescribed_on': _iso(pm.prescribed_on),
            'dosage': pm.dosage,
            'frequency': pm.frequency,
            'notes': pm.notes,
            'doctor': _doctor_ref(pm.doctor),
        } for pm in p.medications.all()],
    }


def all_histories() -> list[dict]:
    """Histories of every patient whose user account is active."""
    qs = _history_queryset().filter(user__is_active=True).order_by('id')
    return [build_history(p) for p in qs]


def patient_history(patient_id: int) -> dict | None:
    p = _history_queryset().filter(id=patient_id).first()
    return build_history(p) if p else None
