"""
Best-effort mirroring of doctors and patients to an external FHIR R4 server.

Local rows are the source of truth.  Every function in the ``sync_*`` /
``unsync_*`` family runs after the local write has been committed and
never raises for transport or server errors: failures are logged and the
caller carries on.  There is no retry queue and no reconciliation.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests
from django.conf import settings

from clinic.models import Doctor, Patient

logger = logging.getLogger(__name__)

FHIR_HEADERS = {
    'Content-Type': 'application/fhir+json',
    'Accept': 'application/fhir+json',
}

# Local gender values (English or Spanish) to FHIR administrative-gender codes
GENDER_MAP = {
    'male': 'male',
    'masculino': 'male',
    'female': 'female',
    'femenino': 'female',
    'other': 'other',
    'otro': 'other',
    'unknown': 'unknown',
    'desconocido': 'unknown',
}


class FhirError(RuntimeError):
    """The FHIR server answered with something we cannot use."""


def _url(resource_type: str, fhir_id: Optional[str] = None) -> str:
    base = settings.FHIR_BASE_URL.rstrip('/')
    return f"{base}/{resource_type}/{fhir_id}" if fhir_id else f"{base}/{resource_type}"


def _send(method: str, url: str, payload: Optional[dict] = None) -> dict:
    r = requests.request(method, url, json=payload, headers=FHIR_HEADERS, timeout=settings.FHIR_TIMEOUT)
    r.raise_for_status()
    if not r.content:
        return {}
    return r.json()


def split_name(full_name: str) -> tuple[str, str]:
    parts = (full_name or '').split()
    if not parts:
        return '', 'Unknown'
    return parts[0], ' '.join(parts[1:]) or 'Unknown'


def _human_name(given: str, family: str) -> dict:
    name = {'use': 'official', 'family': family}
    if given:
        name['given'] = [given]
    return name


def fhir_gender(value: Optional[str]) -> str:
    return GENDER_MAP.get((value or '').strip().lower(), 'unknown')


def patient_resource(patient: Patient) -> dict:
    """Build a FHIR ``Patient`` resource from a local patient row."""
    user = patient.user
    given, family = split_name(user.username if user else f"Paciente {patient.pk}")
    resource = {
        'resourceType': 'Patient',
        'identifier': [{
            'system': settings.FHIR_IDENTIFIER_SYSTEM,
            'value': patient.identification_number or str(patient.pk),
        }],
        'active': bool(user and user.is_active),
        'name': [_human_name(given, family)],
        'gender': fhir_gender(patient.gender),
    }
    # FHIR rejects empty strings, so blank contact fields are left out
    telecom = []
    if (patient.phone or '').strip():
        telecom.append({'system': 'phone', 'value': patient.phone.strip()})
    if user and user.email:
        telecom.append({'system': 'email', 'value': user.email})
    if telecom:
        resource['telecom'] = telecom
    if (patient.address or '').strip():
        resource['address'] = [{'text': patient.address.strip()}]
    if patient.birth_date:
        resource['birthDate'] = patient.birth_date.isoformat()
    if patient.fhir_id:
        resource['id'] = patient.fhir_id
    return resource


def practitioner_resource(doctor: Doctor) -> dict:
    """Build a FHIR ``Practitioner`` resource from a local doctor row."""
    user = doctor.user
    given, family = split_name(user.username if user else f"Medico {doctor.pk}")
    resource = {
        'resourceType': 'Practitioner',
        'identifier': [{
            'system': settings.FHIR_IDENTIFIER_SYSTEM,
            'value': f"medico-{doctor.pk}",
        }],
        'active': bool(user and user.is_active),
        'name': [_human_name(given, family)],
        'qualification': [{'code': {'text': doctor.specialty}}],
    }
    if user and user.email:
        resource['telecom'] = [{'system': 'email', 'value': user.email}]
    if doctor.fhir_id:
        resource['id'] = doctor.fhir_id
    return resource


def push_resource(resource_type: str, resource: dict, fhir_id: Optional[str] = None) -> str:
    """Create (POST) or update (PUT) a resource and return its server id."""
    if fhir_id:
        data = _send('PUT', _url(resource_type, fhir_id), resource)
        return data.get('id') or fhir_id
    data = _send('POST', _url(resource_type), resource)
    new_id = data.get('id')
    if not new_id:
        raise FhirError(f"{resource_type} created without an id in the response")
    return new_id


def remove_resource(resource_type: str, fhir_id: str) -> None:
    _send('DELETE', _url(resource_type, fhir_id))


def _mirror(model, row, resource_type: str, resource: dict) -> Optional[str]:
    try:
        fhir_id = push_resource(resource_type, resource, row.fhir_id)
    except (requests.RequestException, ValueError, FhirError) as e:
        logger.warning("FHIR %s sync failed for local id %s: %s", resource_type, row.pk, e)
        return None
    if fhir_id != row.fhir_id:
        model.objects.filter(pk=row.pk).update(fhir_id=fhir_id)
        row.fhir_id = fhir_id
    logger.info("FHIR %s/%s mirrored from local id %s", resource_type, fhir_id, row.pk)
    return fhir_id


def _unmirror(resource_type: str, fhir_id: Optional[str]) -> bool:
    if not fhir_id:
        return False
    try:
        remove_resource(resource_type, fhir_id)
    except (requests.RequestException, ValueError) as e:
        logger.warning("FHIR %s/%s delete failed: %s", resource_type, fhir_id, e)
        return False
    return True


def sync_patient(patient: Patient) -> Optional[str]:
    if not settings.FHIR_SYNC_ENABLE:
        return None
    return _mirror(Patient, patient, 'Patient', patient_resource(patient))


def unsync_patient(fhir_id: Optional[str]) -> bool:
    if not settings.FHIR_SYNC_ENABLE:
        return False
    return _unmirror('Patient', fhir_id)


def sync_doctor(doctor: Doctor) -> Optional[str]:
    if not settings.FHIR_SYNC_ENABLE:
        return None
    return _mirror(Doctor, doctor, 'Practitioner', practitioner_resource(doctor))


def unsync_doctor(fhir_id: Optional[str]) -> bool:
    if not settings.FHIR_SYNC_ENABLE:
        return False
    return _unmirror('Practitioner', fhir_id)
