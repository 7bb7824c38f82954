"""
Role normalisation.

Role rows carry human readable names (``Administrador``, ``Médico``,
``Paciente``) while access control works on three canonical values.
The translation table below is the only place where the two meet.
"""
from __future__ import annotations

import unicodedata
from typing import Optional

ADMIN = 'admin'
PHYSICIAN = 'physician'
PATIENT = 'patient'

CANONICAL_ROLES = (ADMIN, PHYSICIAN, PATIENT)

# keys are lower case without accents
ROLE_TRANSLATION = {
    'administrador': ADMIN,
    'administrator': ADMIN,
    'admin': ADMIN,
    'medico': PHYSICIAN,
    'physician': PHYSICIAN,
    'doctor': PHYSICIAN,
    'paciente': PATIENT,
    'patient': PATIENT,
}


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize('NFKD', value.strip().lower())
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def normalize_role(value) -> Optional[str]:
    """Return the canonical role for ``value`` or ``None`` when unknown."""
    if not value or not isinstance(value, str):
        return None
    return ROLE_TRANSLATION.get(_fold(value))


def role_for_user(user) -> Optional[str]:
    """Canonical role of a user, looked up through its role row."""
    role = getattr(user, 'role', None)
    return normalize_role(role.name) if role is not None else None
