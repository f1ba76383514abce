# a1_core/establishments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from a1_core.establishments.models import Establishment, EstablishmentType


class EstablishmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Establishment
        fields = [
            "id",
            "name",
            "code",
            "establishment_type",
            "cnes",
            "phone",
            "city",
            "state",
            "is_active",
            "deactivated_at",
            "deactivation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class EstablishmentCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.SlugField(max_length=64)
    establishment_type = serializers.ChoiceField(choices=EstablishmentType.choices, required=False)
    cnes = serializers.CharField(max_length=16, required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    state = serializers.CharField(max_length=2, required=False, allow_blank=True, default="")


class EstablishmentUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    code = serializers.SlugField(max_length=64, required=False)
    establishment_type = serializers.ChoiceField(choices=EstablishmentType.choices, required=False)
    cnes = serializers.CharField(max_length=16, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    city = serializers.CharField(max_length=128, required=False, allow_blank=True)
    state = serializers.CharField(max_length=2, required=False, allow_blank=True)

    is_active = serializers.BooleanField(required=False)
    deactivation_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class EstablishmentDeactivateSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
