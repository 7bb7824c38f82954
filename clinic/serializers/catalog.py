from rest_framework import serializers

from .fields import CleanCharField


class CatalogItemSerializer(serializers.Serializer):
    """Input for condition and medication catalogue entries."""
    name = CleanCharField(max_length=150, error_messages={'required': 'El nombre es requerido', 'blank': 'El nombre es requerido'})
    description = CleanCharField(required=False, allow_blank=True, allow_null=True)
