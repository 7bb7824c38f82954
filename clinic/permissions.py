"""
Custom permission classes for role and patient-record based access control.
"""
from rest_framework.permissions import BasePermission

from .authentication import get_identity
from .roles import ADMIN, PHYSICIAN, PATIENT

STAFF_ROLES = {ADMIN, PHYSICIAN}

# Names under which a route or request can reference a patient record
PATIENT_REFERENCE_KEYS = ('patient_id',)


class HasRole(BasePermission):
    """Allow access only to callers whose canonical role is in ``roles``."""
    roles: frozenset = frozenset()
    message = 'No tienes permisos para esta acción'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        identity = get_identity(request)
        return bool(identity and identity.role in self.roles)


class IsAdminRole(HasRole):
    """Allow access only to administrators."""
    roles = frozenset({ADMIN})


class IsPhysicianRole(HasRole):
    roles = frozenset({PHYSICIAN})


class IsPatientRole(HasRole):
    roles = frozenset({PATIENT})


class IsStaffRole(HasRole):
    """Administrators and physicians."""
    roles = frozenset(STAFF_ROLES)


def require_role(*roles: str) -> type:
    """Build a permission class accepting any of ``roles``."""
    return type('RequireRole', (HasRole,), {'roles': frozenset(roles)})


def _referenced_patient_ids(request, view) -> set:
    found = set()
    kwargs = getattr(view, 'kwargs', None) or {}
    sources = [kwargs, request.query_params]
    if isinstance(request.data, dict):
        sources.append(request.data)
    for source in sources:
        for key in PATIENT_REFERENCE_KEYS:
            value = source.get(key)
            if value in (None, ''):
                continue
            try:
                found.add(int(value))
            except (TypeError, ValueError):
                # an unparseable reference can never be the caller's own record
                found.add(None)
    return found


class PatientRecordScope(BasePermission):
    """A patient may only reference their own patient record.

    Routes and requests that carry no patient reference pass through; the
    check never applies to administrators or physicians.
    """
    message = 'No tienes acceso a los datos de otro paciente'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        identity = get_identity(request)
        if identity is None or not identity.is_patient:
            return True
        referenced = _referenced_patient_ids(request, view)
        return all(pid is not None and pid == identity.patient_id for pid in referenced)
