# a1_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets

from a1_core.audit.api.serializers import AuditEventSerializer
from a1_core.audit.models import AuditEvent
from a1_core.audit.selectors import list_audit_events
from a1_core.common.api.pagination import paginate
from a1_core.iam.mixins import EstablishmentScopedMixin
from a1_core.iam.permissions import permission_required
from a1_core.iam.profiles import PermissionToken as P
from a1_core.iam.scope import parse_uuid


class AuditEventViewSet(EstablishmentScopedMixin, viewsets.GenericViewSet):
    """
    List audit events. Restricted profiles only see their establishment's events.
    """
    permission_classes = [permission_required(P.VIEW_REPORTS)]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="entity_type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity type (e.g. Attendance, Patient).",
            ),
            OpenApiParameter(
                name="entity_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity UUID.",
            ),
            OpenApiParameter(
                name="event_code",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by event code (e.g. attendance.created).",
            ),
        ],
    )
    def list(self, request):
        entity_id_raw = request.query_params.get("entity_id") or None
        qs = list_audit_events(
            scope=self.establishment_scope,
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=parse_uuid(entity_id_raw, "entity_id") if entity_id_raw else None,
            event_code=request.query_params.get("event_code") or None,
        )
        return paginate(request, qs, AuditEventSerializer, paginator=self.paginator)
