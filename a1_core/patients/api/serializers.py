# a1_core/patients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from a1_core.patients.models import Patient


class PatientSerializer(serializers.ModelSerializer):
    # Establishment of the latest attendance (null until the first one)
    owner_establishment_id = serializers.UUIDField(read_only=True, allow_null=True, default=None)

    class Meta:
        model = Patient
        fields = [
            "id",
            "full_name",
            "document",
            "birth_date",
            "phone",
            "email",
            "owner_establishment_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class _DocumentField(serializers.RegexField):
    def __init__(self, **kwargs):
        super().__init__(
            regex=r"^\d{11}$",
            error_messages={"invalid": "CPF must have 11 digits."},
            **kwargs,
        )

    def to_internal_value(self, data):
        digits = "".join(ch for ch in str(data) if ch.isdigit())
        return super().to_internal_value(digits)


class PatientCreateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    document = _DocumentField(required=False, allow_null=True)
    birth_date = serializers.DateField(required=False, allow_null=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")


class PatientUpdateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255, required=False)
    document = _DocumentField(required=False)
    birth_date = serializers.DateField(required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
