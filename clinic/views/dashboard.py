"""
Administrative dashboard endpoint.

Provides record counts for administrators along with the identity the
request was authenticated as.
"""
from __future__ import annotations

from django.db.models import Count
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.authentication import get_identity
from clinic.permissions import IsAdminRole
from clinic.models import Appointment, Doctor, Patient, User


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_dashboard(request):
    """Return dashboard counters for administrators.

    Appointment counts are broken down by status; every status is present
    in the response even when no appointment carries it.
    """
    by_status = {code: 0 for code, _ in Appointment.STATUS_CHOICES}
    for row in Appointment.objects.values('status').annotate(n=Count('id')):
        by_status[row['status']] = row['n']
    identity = get_identity(request)
    return Response({
        'success': True,
        'user': {'id': identity.user_id, 'name': identity.username, 'role': identity.role},
        'users': User.objects.count(),
        'active_users': User.objects.filter(is_active=True).count(),
        'patients': Patient.objects.count(),
        'doctors': Doctor.objects.count(),
        'appointments': by_status,
    })
