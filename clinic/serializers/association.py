from rest_framework import serializers

from .fields import CleanCharField


class PatientConditionCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1)
    condition_id = serializers.IntegerField(min_value=1)
    doctor_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    diagnosed_on = serializers.DateField(required=False, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True, allow_null=True)


class PatientConditionUpdateSerializer(serializers.Serializer):
    doctor_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    diagnosed_on = serializers.DateField(required=False, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True, allow_null=True)


class PatientMedicationCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1)
    medication_id = serializers.IntegerField(min_value=1)
    doctor_id = serializers.IntegerField(min_value=1)
    prescribed_on = serializers.DateField(required=False, allow_null=True)
    dosage = CleanCharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    frequency = CleanCharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True, allow_null=True)


class PatientMedicationUpdateSerializer(serializers.Serializer):
    doctor_id = serializers.IntegerField(min_value=1, required=False)
    prescribed_on = serializers.DateField(required=False, allow_null=True)
    dosage = CleanCharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    frequency = CleanCharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True, allow_null=True)
