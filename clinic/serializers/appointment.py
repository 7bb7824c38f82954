from rest_framework import serializers

from clinic.models import Appointment
from .fields import CleanCharField

STATUS_VALUES = [code for code, _ in Appointment.STATUS_CHOICES]
# Spanish labels are accepted on input
STATUS_ALIASES = {label.lower(): code for code, label in Appointment.STATUS_CHOICES}


class _StatusField(serializers.CharField):
    def to_internal_value(self, data):
        value = super().to_internal_value(data).strip()
        code = value.lower() if value.lower() in STATUS_VALUES else STATUS_ALIASES.get(value.lower())
        if code is None:
            raise serializers.ValidationError(f"Estado no válido. Valores permitidos: {', '.join(STATUS_VALUES)}")
        return code


class AppointmentCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1)
    doctor_id = serializers.IntegerField(min_value=1)
    scheduled_at = serializers.DateTimeField()
    reason = CleanCharField(max_length=255, required=False, allow_blank=True)
    status = _StatusField(required=False)


class AppointmentUpdateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1, required=False)
    doctor_id = serializers.IntegerField(min_value=1, required=False)
    scheduled_at = serializers.DateTimeField(required=False)
    reason = CleanCharField(max_length=255, required=False, allow_blank=True)
    status = _StatusField(required=False)
