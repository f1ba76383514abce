# a1_core/iam/api/users.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from a1_core.common.api.pagination import paginate
from a1_core.iam.api.serializers import (
    PasswordResetSerializer,
    UserCreateSerializer,
    UserProfileSerializer,
    UserUpdateSerializer,
)
from a1_core.iam.mixins import EstablishmentScopedMixin
from a1_core.iam.models import UserProfile
from a1_core.iam.ownership import ResourceType
from a1_core.iam.permissions import ActionPermission, get_access_policy
from a1_core.iam.profiles import PermissionToken as P
from a1_core.iam.services.users import UserService, UserUpdate


class UserViewSet(EstablishmentScopedMixin, viewsets.GenericViewSet):
    """
    Staff accounts. Restricted profiles see and manage only the users of
    their own establishment; system-wide accounts are invisible to them.
    """
    permission_classes = [ActionPermission]
    ownership_resource_type = ResourceType.USER

    required_permissions = {
        "list": P.MANAGE_USERS,
        "retrieve": P.MANAGE_USERS,
        "create": P.MANAGE_USERS,
        "partial_update": P.MANAGE_USERS,
        "deactivate": P.MANAGE_USERS,
        "reset_password": P.MANAGE_USERS,
    }

    serializer_class = UserProfileSerializer
    queryset = UserProfile.objects.none()

    filterset_fields = ["profile", "is_active"]
    search_fields = ["user__username", "user__email", "full_name"]
    ordering_fields = ["created_at", "full_name", "profile"]

    def get_service(self) -> UserService:
        return UserService(get_access_policy(self))

    @extend_schema(tags=["Users"], responses={200: UserProfileSerializer(many=True)})
    def list(self, request):
        qs = self.filter_queryset(self.scoped_queryset().order_by("-created_at"))
        return paginate(request, qs, UserProfileSerializer, paginator=self.paginator)

    @extend_schema(tags=["Users"], responses={200: UserProfileSerializer})
    def retrieve(self, request, pk=None):
        return Response(UserProfileSerializer(self.get_owned_object()).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Users"], request=UserCreateSerializer, responses={201: UserProfileSerializer})
    def create(self, request):
        s = UserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        up = self.get_service().create_user(
            actor=self.get_principal(),
            username=d["username"],
            password=d["password"],
            profile=d["profile"],
            email=d.get("email") or "",
            full_name=d.get("full_name") or "",
            establishment_id=d.get("establishment_id") or self.establishment_scope.establishment_id,
        )
        return Response(UserProfileSerializer(up).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Users"], request=UserUpdateSerializer, responses={200: UserProfileSerializer})
    def partial_update(self, request, pk=None):
        s = UserUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        up = self.get_service().update_user(
            actor=self.get_principal(),
            user_profile_id=self.resource_owner.resource_id,
            patch=UserUpdate(
                full_name=d.get("full_name"),
                email=d.get("email"),
                profile=d.get("profile"),
                establishment_id=d.get("establishment_id"),
                clear_establishment="establishment_id" in d and d["establishment_id"] is None,
            ),
        )
        return Response(UserProfileSerializer(up).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Users"], request=None, responses={200: UserProfileSerializer})
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        up = self.get_service().deactivate_user(
            actor=self.get_principal(),
            user_profile_id=self.resource_owner.resource_id,
        )
        return Response(UserProfileSerializer(up).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Users"], request=PasswordResetSerializer, responses={204: None})
    @action(detail=True, methods=["post"], url_path="reset-password")
    def reset_password(self, request, pk=None):
        s = PasswordResetSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        self.get_service().reset_password(
            actor=self.get_principal(),
            user_profile_id=self.resource_owner.resource_id,
            password=s.validated_data["password"],
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
