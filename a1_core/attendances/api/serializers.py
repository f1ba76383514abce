# a1_core/attendances/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from a1_core.attendances.models import Attendance, AttendanceStatus


class AttendanceSerializer(serializers.ModelSerializer):
    patient_id = serializers.UUIDField(read_only=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    establishment_id = serializers.UUIDField(read_only=True)
    created_by_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Attendance
        fields = [
            "id",
            "patient_id",
            "patient_name",
            "establishment_id",
            "status",
            "reason",
            "started_at",
            "finished_at",
            "created_by_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AttendanceCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    # Optional for restricted profiles (defaults to their establishment)
    establishment_id = serializers.UUIDField(required=False)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    started_at = serializers.DateTimeField(required=False)


class AttendanceUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AttendanceStatus.choices, required=False)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
