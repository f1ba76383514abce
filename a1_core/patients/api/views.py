# a1_core/patients/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from a1_core.attendances.api.serializers import AttendanceSerializer
from a1_core.attendances.selectors import attendances_for_patient
from a1_core.common.api.pagination import paginate
from a1_core.iam.mixins import EstablishmentScopedMixin
from a1_core.iam.ownership import ResourceType
from a1_core.iam.permissions import ActionPermission
from a1_core.iam.policy import any_of
from a1_core.iam.profiles import PermissionToken as P
from a1_core.patients.api.serializers import (
    PatientCreateSerializer,
    PatientSerializer,
    PatientUpdateSerializer,
)
from a1_core.patients.models import Patient
from a1_core.patients.services import PatientService, PatientUpdate

_READ = any_of(P.MANAGE_PATIENTS, P.MANAGE_ATTENDANCES)


class PatientViewSet(EstablishmentScopedMixin, viewsets.GenericViewSet):
    """
    Patients visible to the caller's establishment, as decided by the
    configured patient-ownership policy.
    """
    permission_classes = [ActionPermission]
    ownership_resource_type = ResourceType.PATIENT

    required_permissions = {
        "list": _READ,
        "retrieve": _READ,
        "attendances": _READ,
        "create": P.MANAGE_PATIENTS,
        "partial_update": P.MANAGE_PATIENTS,
    }

    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    search_fields = ["full_name", "document"]
    ordering_fields = ["full_name", "created_at"]

    @extend_schema(tags=["Patients"], responses={200: PatientSerializer(many=True)})
    def list(self, request):
        qs = self.filter_queryset(self.scoped_queryset().order_by("full_name"))
        return paginate(request, qs, PatientSerializer, paginator=self.paginator)

    @extend_schema(tags=["Patients"], responses={200: PatientSerializer})
    def retrieve(self, request, pk=None):
        return Response(PatientSerializer(self.get_owned_object()).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Patients"], request=PatientCreateSerializer, responses={201: PatientSerializer})
    def create(self, request):
        s = PatientCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        patient = PatientService.create(
            actor=self.get_principal(),
            scope=self.establishment_scope,
            **s.validated_data,
        )
        return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Patients"], request=PatientUpdateSerializer, responses={200: PatientSerializer})
    def partial_update(self, request, pk=None):
        s = PatientUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        PatientService.update(
            actor=self.get_principal(),
            scope=self.establishment_scope,
            patient_id=self.resource_owner.resource_id,
            patch=PatientUpdate(**s.validated_data),
        )
        return Response(PatientSerializer(self.get_owned_object()).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Patients"], responses={200: AttendanceSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="attendances")
    def attendances(self, request, pk=None):
        """Attendance history of the patient, limited to the caller's scope."""
        qs = attendances_for_patient(
            patient_id=self.resource_owner.resource_id,
            scope=self.establishment_scope,
        )
        return paginate(request, qs, AttendanceSerializer, paginator=self.paginator)
