"""
Bearer token authentication.

This module defines the authentication class used by every API view.
It builds on simplejwt's ``JWTAuthentication`` for signature and expiry
checks and then resolves the caller's identity: the active user row,
the canonical role carried in the token and, for patients, the id of
their patient record.  The resolved :class:`Identity` is attached to
``request.user.identity`` so permission classes and views can use it
without touching the token again.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from rest_framework import exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from .roles import PATIENT, normalize_role, role_for_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str
    role: str
    patient_id: Optional[int] = None

    @property
    def is_patient(self) -> bool:
        return self.role == PATIENT


class BearerTokenAuthentication(JWTAuthentication):
    """Validate ``Authorization: Bearer <token>`` and resolve the caller.

    Failures map onto two outcomes: a bad, expired or orphaned credential
    raises ``AuthenticationFailed`` (401) and a role claim outside the
    translation table raises ``PermissionDenied`` (403).
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None:
            return None
        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
        except (InvalidToken, TokenError):
            raise exceptions.AuthenticationFailed('Token inválido o expirado')

        try:
            user = self.get_user(validated_token)
        except (InvalidToken, exceptions.AuthenticationFailed):
            raise exceptions.AuthenticationFailed('Usuario no encontrado o inactivo')

        role = normalize_role(validated_token.get('role'))
        if role is None:
            logger.info("Rejected token for user %s with role claim %r", user.pk, validated_token.get('role'))
            raise exceptions.PermissionDenied('Rol de usuario no válido')

        patient_id = None
        if role == PATIENT:
            patient_id = _patient_record_id(user)

        user.identity = Identity(
            user_id=user.pk,
            username=user.get_username(),
            role=role,
            patient_id=patient_id,
        )
        return user, validated_token


def _patient_record_id(user) -> Optional[int]:
    from .models import Patient
    return Patient.objects.filter(user_id=user.pk).values_list('id', flat=True).first()


def identity_for_user(user) -> Optional[Identity]:
    """Build an identity from the user row when no token was decoded.

    Used for sessions authenticated by other means (e.g. test clients
    calling ``force_authenticate``).
    """
    role = role_for_user(user)
    if role is None:
        return None
    patient_id = _patient_record_id(user) if role == PATIENT else None
    return Identity(user_id=user.pk, username=user.get_username(), role=role, patient_id=patient_id)


def get_identity(request) -> Optional[Identity]:
    """Return the identity resolved for the request, if any."""
    user = getattr(request, 'user', None)
    if not (user and getattr(user, 'is_authenticated', False)):
        return None
    identity = getattr(user, 'identity', None)
    if identity is None:
        identity = identity_for_user(user)
        user.identity = identity
    return identity
