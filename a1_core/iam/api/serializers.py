# a1_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from a1_core.iam.models import UserProfile
from a1_core.iam.profiles import Profile


class UserProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    establishment_id = serializers.UUIDField(read_only=True, allow_null=True)
    establishment_name = serializers.CharField(source="establishment.name", read_only=True, default=None)

    class Meta:
        model = UserProfile
        fields = [
            "id",
            "user_id",
            "username",
            "email",
            "full_name",
            "profile",
            "establishment_id",
            "establishment_name",
            "is_active",
            "deactivated_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UserCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=8, write_only=True)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    profile = serializers.ChoiceField(choices=Profile.choices)
    establishment_id = serializers.UUIDField(required=False, allow_null=True)


class UserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    profile = serializers.ChoiceField(choices=Profile.choices, required=False)
    establishment_id = serializers.UUIDField(required=False, allow_null=True)


class PasswordResetSerializer(serializers.Serializer):
    password = serializers.CharField(min_length=8, write_only=True)
