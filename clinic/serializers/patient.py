from rest_framework import serializers

from .fields import CleanCharField

# Accepted gender inputs, stored as the English code
GENDER_ALIASES = {
    'male': 'male', 'masculino': 'male',
    'female': 'female', 'femenino': 'female',
    'other': 'other', 'otro': 'other',
    'unknown': 'unknown', 'desconocido': 'unknown',
}


def _validate_gender(v):
    if v in (None, ''):
        return v
    code = GENDER_ALIASES.get(v.strip().lower())
    if code is None:
        raise serializers.ValidationError(
            'Género no válido. Valores permitidos: male, female, other, unknown o sus equivalentes en español'
        )
    return code


class PatientCreateSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)
    identification_number = CleanCharField(max_length=30)
    birth_date = serializers.DateField(required=False, allow_null=True)
    phone = CleanCharField(max_length=30, required=False, allow_blank=True)
    address = CleanCharField(max_length=255, required=False, allow_blank=True)
    gender = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_gender(self, v):
        return _validate_gender(v)


class PatientUpdateSerializer(serializers.Serializer):
    identification_number = CleanCharField(max_length=30, required=False)
    birth_date = serializers.DateField(required=False, allow_null=True)
    phone = CleanCharField(max_length=30, required=False, allow_blank=True)
    address = CleanCharField(max_length=255, required=False, allow_blank=True)
    gender = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_gender(self, v):
        return _validate_gender(v)
