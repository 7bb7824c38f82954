from rest_framework.exceptions import ValidationError

from clinic.authentication import get_identity


def scoped_patient_filter(request) -> dict:
    """Queryset filter limiting grouped listings to the caller's reach.

    Patients only ever see their own record; staff may narrow the listing
    with ``?patient_id=``.
    """
    identity = get_identity(request)
    if identity.is_patient:
        return {'patient_id': identity.patient_id}
    raw = request.query_params.get('patient_id')
    if raw in (None, ''):
        return {}
    try:
        return {'patient_id': int(raw)}
    except ValueError:
        raise ValidationError('patient_id debe ser un número')
