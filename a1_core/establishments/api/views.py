# a1_core/establishments/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from a1_core.common.api.pagination import paginate
from a1_core.establishments.api.serializers import (
    EstablishmentCreateSerializer,
    EstablishmentDeactivateSerializer,
    EstablishmentSerializer,
    EstablishmentUpdateSerializer,
)
from a1_core.establishments.models import Establishment
from a1_core.establishments.selectors import establishments_in_scope
from a1_core.establishments.services import EstablishmentService, EstablishmentUpdate
from a1_core.iam.mixins import EstablishmentScopedMixin
from a1_core.iam.ownership import ResourceType
from a1_core.iam.permissions import ActionPermission
from a1_core.iam.profiles import PermissionToken as P

_TRUTHY = {"1", "true", "yes", "y", "on"}


class EstablishmentViewSet(EstablishmentScopedMixin, viewsets.GenericViewSet):
    permission_classes = [ActionPermission]
    ownership_resource_type = ResourceType.ESTABLISHMENT

    required_permissions = {
        "list": P.VIEW_DASHBOARD,
        "retrieve": P.VIEW_DASHBOARD,
        "create": P.MANAGE_ESTABLISHMENTS,
        "partial_update": P.MANAGE_ESTABLISHMENTS,
        "deactivate": P.MANAGE_ESTABLISHMENTS,
    }

    serializer_class = EstablishmentSerializer
    queryset = Establishment.objects.none()

    @extend_schema(tags=["Establishments"], responses={200: EstablishmentSerializer(many=True)})
    def list(self, request):
        active_only = request.query_params.get("active_only", "1").strip().lower() in _TRUTHY
        qs = establishments_in_scope(
            scope=self.establishment_scope,
            active_only=active_only,
            establishment_type=request.query_params.get("establishment_type") or None,
        )
        return paginate(request, qs, EstablishmentSerializer, paginator=self.paginator)

    @extend_schema(tags=["Establishments"], responses={200: EstablishmentSerializer})
    def retrieve(self, request, pk=None):
        return Response(EstablishmentSerializer(self.get_owned_object()).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Establishments"],
        request=EstablishmentCreateSerializer,
        responses={201: EstablishmentSerializer},
    )
    def create(self, request):
        s = EstablishmentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        obj = EstablishmentService.create(
            actor_user_id=request.user.id,
            name=d["name"],
            code=d["code"],
            establishment_type=d.get("establishment_type") or "ubs",
            cnes=d.get("cnes") or "",
            phone=d.get("phone") or "",
            city=d.get("city") or "",
            state=d.get("state") or "",
        )
        return Response(EstablishmentSerializer(obj).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Establishments"],
        request=EstablishmentUpdateSerializer,
        responses={200: EstablishmentSerializer},
    )
    def partial_update(self, request, pk=None):
        s = EstablishmentUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        obj = EstablishmentService.update(
            actor_user_id=request.user.id,
            establishment_id=self.resource_owner.resource_id,
            patch=EstablishmentUpdate(**d),
        )
        return Response(EstablishmentSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Establishments"],
        request=EstablishmentDeactivateSerializer,
        responses={200: EstablishmentSerializer},
    )
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        s = EstablishmentDeactivateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        obj = EstablishmentService.deactivate(
            actor_user_id=request.user.id,
            establishment_id=self.resource_owner.resource_id,
            reason=s.validated_data.get("reason") or "",
        )
        return Response(EstablishmentSerializer(obj).data, status=status.HTTP_200_OK)
