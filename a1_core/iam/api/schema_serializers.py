# a1_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()


class TokenPairResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    access = serializers.CharField()
    refresh = serializers.CharField()


class RefreshRequestSerializer(serializers.Serializer):
    # Optional when the refresh cookie is present
    refresh = serializers.CharField(required=False)


class LogoutResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField(allow_null=True, required=False)
    email = serializers.EmailField(allow_null=True, required=False)
    full_name = serializers.CharField(allow_blank=True, required=False)


class MeProfileSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    code = serializers.CharField()
    label = serializers.CharField()


class MeEstablishmentSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    code = serializers.CharField()
    name = serializers.CharField()
    establishment_type = serializers.CharField()


class ScopeSerializer(serializers.Serializer):
    unrestricted = serializers.BooleanField()
    establishment_id = serializers.UUIDField(allow_null=True)


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    profile = MeProfileSerializer()
    permissions = serializers.ListField(child=serializers.CharField())
    establishment = MeEstablishmentSerializer(allow_null=True)
    scope = ScopeSerializer(allow_null=True)
