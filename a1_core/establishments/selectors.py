# a1_core/establishments/selectors.py
from __future__ import annotations


from django.db.models import QuerySet

from a1_core.establishments.models import Establishment
from a1_core.iam.scope import EstablishmentScope


def establishments_in_scope(
    *,
    scope: EstablishmentScope,
    active_only: bool = True,
    establishment_type: str | None = None,
) -> QuerySet[Establishment]:
    qs = scope.filter(Establishment.objects.all(), field="id")
    if active_only:
        qs = qs.filter(is_active=True)
    if establishment_type:
        qs = qs.filter(establishment_type=establishment_type)
    return qs.order_by("name")
