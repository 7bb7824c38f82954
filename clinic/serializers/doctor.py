from rest_framework import serializers

from .fields import CleanCharField


class DoctorCreateSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)
    specialty = CleanCharField(max_length=100)


class DoctorUpdateSerializer(serializers.Serializer):
    specialty = CleanCharField(max_length=100, error_messages={'required': 'La especialidad es requerida'})
