from __future__ import annotations

from django.conf import settings
from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


class A1AutoSchema(AutoSchema):
    """
    Global OpenAPI improvements:

    - Documents the optional establishment scope header on establishment-scoped
      view sets (the ones using EstablishmentScopedMixin)
    - Skips it for auth / me endpoints and schema/docs endpoints
    """

    def _establishment_header(self) -> OpenApiParameter:
        return OpenApiParameter(
            name=getattr(settings, "IAM_ESTABLISHMENT_HEADER", "X-Establishment-Id"),
            type=OpenApiTypes.UUID,
            location=OpenApiParameter.HEADER,
            required=False,
            description=(
                "Establishment to operate in. Optional: restricted profiles default to their "
                "own establishment and get 403 for any other; unrestricted profiles use it "
                "to narrow results."
            ),
        )

    def _is_scoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False
        return bool(getattr(view, "establishment_scoped", False))

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if self._is_scoped_endpoint():
            header = self._establishment_header()
            if not any(p.name.lower() == header.name.lower() for p in params):
                params.append(header)

        return params
