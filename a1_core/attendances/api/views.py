# a1_core/attendances/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from a1_core.attendances.api.serializers import (
    AttendanceCreateSerializer,
    AttendanceSerializer,
    AttendanceUpdateSerializer,
)
from a1_core.attendances.models import Attendance
from a1_core.attendances.selectors import with_status
from a1_core.attendances.services import AttendanceService, AttendanceUpdate
from a1_core.common.api.pagination import paginate
from a1_core.iam.mixins import EstablishmentScopedMixin
from a1_core.iam.ownership import ResourceType
from a1_core.iam.permissions import ActionPermission
from a1_core.iam.profiles import PermissionToken as P


class AttendanceViewSet(EstablishmentScopedMixin, viewsets.GenericViewSet):
    permission_classes = [ActionPermission]
    ownership_resource_type = ResourceType.ATTENDANCE

    required_permissions = {
        "list": P.MANAGE_ATTENDANCES,
        "retrieve": P.MANAGE_ATTENDANCES,
        "create": P.MANAGE_ATTENDANCES,
        "partial_update": P.MANAGE_ATTENDANCES,
    }

    serializer_class = AttendanceSerializer
    queryset = Attendance.objects.none()

    @extend_schema(
        tags=["Attendances"],
        responses={200: AttendanceSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by status (waiting, in_progress, finished, cancelled).",
            ),
        ],
    )
    def list(self, request):
        qs = with_status(
            self.scoped_queryset(Attendance.objects.select_related("patient", "establishment")),
            request.query_params.get("status") or None,
        )
        return paginate(request, qs, AttendanceSerializer, paginator=self.paginator)

    @extend_schema(tags=["Attendances"], responses={200: AttendanceSerializer})
    def retrieve(self, request, pk=None):
        return Response(AttendanceSerializer(self.get_owned_object()).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Attendances"], request=AttendanceCreateSerializer, responses={201: AttendanceSerializer})
    def create(self, request):
        s = AttendanceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        att = AttendanceService.create(
            actor=self.get_principal(),
            scope=self.establishment_scope,
            patient_id=d["patient_id"],
            reason=d.get("reason") or "",
            started_at=d.get("started_at"),
            resolver=self.get_ownership_resolver(),
        )
        return Response(AttendanceSerializer(att).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Attendances"], request=AttendanceUpdateSerializer, responses={200: AttendanceSerializer})
    def partial_update(self, request, pk=None):
        s = AttendanceUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        att = AttendanceService.update(
            actor=self.get_principal(),
            attendance_id=self.resource_owner.resource_id,
            patch=AttendanceUpdate(**s.validated_data),
        )
        return Response(AttendanceSerializer(att).data, status=status.HTTP_200_OK)
