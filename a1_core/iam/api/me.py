# a1_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from a1_core.iam.api.schema_serializers import MeResponseSerializer
from a1_core.iam.auth import principal_for
from a1_core.iam.exceptions import EstablishmentNotAssigned, Unauthenticated
from a1_core.iam.permissions import get_access_policy
from a1_core.iam.profiles import Profile


def profile_label(code: str) -> str:
    # Profiles added through IAM_ROLE_MAP have no built-in label
    return Profile(code).label if code in Profile.values else code


class MeView(APIView):
    """
    Who am I: user, profile, permission tokens (for UI gating), home
    establishment and the scope every scoped endpoint will apply.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        principal = principal_for(request.user)
        if principal is None:
            raise Unauthenticated()

        policy = get_access_policy(self)
        profile = request.user.a1_profile
        establishment = profile.establishment

        try:
            scope = policy.scope_for(principal).as_dict()
        except EstablishmentNotAssigned:
            # Misconfigured account: still show who it is, with no usable scope.
            scope = None

        return Response(
            {
                "user": {
                    "id": request.user.id,
                    "username": getattr(request.user, "username", None),
                    "email": getattr(request.user, "email", None),
                    "full_name": profile.full_name,
                },
                "profile": {
                    "id": str(profile.id),
                    "code": profile.profile,
                    "label": profile_label(profile.profile),
                },
                "permissions": sorted(policy.permissions_for(principal)),
                "establishment": (
                    {
                        "id": str(establishment.id),
                        "code": establishment.code,
                        "name": establishment.name,
                        "establishment_type": establishment.establishment_type,
                    }
                    if establishment is not None
                    else None
                ),
                "scope": scope,
            },
            status=status.HTTP_200_OK,
        )
