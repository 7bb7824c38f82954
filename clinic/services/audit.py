"""
Audit trail for logins and administrative writes.
"""
from __future__ import annotations

from typing import Any, Optional

from clinic.models import AuditEvent, User


def client_ip(request) -> Optional[str]:
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_action(*, user: Optional[User], action: str, object_type: Optional[str] = None,
               object_id: Optional[int] = None, detail: Optional[dict[str, Any]] = None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if isinstance(user, User) and user.pk else None,
        action=action,
        object_type=object_type,
        object_id=object_id,
        detail=detail or {},
    )


def audit(request, action: str, obj=None, **detail) -> AuditEvent:
    """Record ``action`` by the request's user on ``obj`` (a model row or None)."""
    detail.setdefault('ip', client_ip(request))
    return log_action(
        user=getattr(request, 'user', None),
        action=action,
        object_type=obj._meta.model_name if obj is not None else None,
        object_id=obj.pk if obj is not None else None,
        detail=detail,
    )
