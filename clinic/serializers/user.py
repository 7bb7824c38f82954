from rest_framework import serializers

from .fields import CleanCharField


class UserCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=150)
    email = serializers.EmailField(error_messages={'invalid': 'Email inválido'})
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False,
                                     error_messages={'min_length': 'La contraseña debe tener al menos 6 caracteres'})
    role_id = serializers.IntegerField(min_value=1)
    active = serializers.BooleanField(required=False, default=True)


class UserUpdateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=150)
    email = serializers.EmailField(error_messages={'invalid': 'Email inválido'})
    password = serializers.CharField(min_length=6, write_only=True, required=False, allow_blank=True,
                                     trim_whitespace=False,
                                     error_messages={'min_length': 'La contraseña debe tener al menos 6 caracteres'})
    role_id = serializers.IntegerField(min_value=1)
    active = serializers.BooleanField()


class RoleSerializer(serializers.Serializer):
    name = CleanCharField(max_length=50)
    description = CleanCharField(max_length=255, required=False, allow_blank=True)
