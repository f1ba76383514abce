# a1_core/iam/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from django.conf import settings
from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

ESTABLISHMENT_FIELD = "establishment_id"
DEFAULT_ESTABLISHMENT_HEADER = "X-Establishment-Id"

INVALID_UUID_MSG = "Invalid {field} (UUID expected)."


@dataclass(frozen=True)
class EstablishmentScope:
    """
    Per-request establishment filter.

    - unrestricted=False: establishment_id is always the caller's home
      establishment; every query is pinned to it.
    - unrestricted=True: establishment_id is the optional narrowing filter the
      caller asked for (None means every establishment).
    """
    unrestricted: bool
    establishment_id: Optional[UUID] = None

    @property
    def is_filtered(self) -> bool:
        return self.establishment_id is not None

    def filter(self, queryset: QuerySet, *, field: str = ESTABLISHMENT_FIELD) -> QuerySet:
        if self.establishment_id is None:
            return queryset
        return queryset.filter(**{field: self.establishment_id})

    def as_dict(self) -> dict[str, Any]:
        return {
            "unrestricted": self.unrestricted,
            "establishment_id": str(self.establishment_id) if self.establishment_id else None,
        }


def parse_uuid(value: Any, field_name: str = ESTABLISHMENT_FIELD) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError({field_name: INVALID_UUID_MSG.format(field=field_name)})


def _header_name() -> str:
    return getattr(settings, "IAM_ESTABLISHMENT_HEADER", DEFAULT_ESTABLISHMENT_HEADER)


def _from_body(request) -> Any:
    data = getattr(request, "data", None)
    if data is None or not hasattr(data, "get"):
        return None
    return data.get(ESTABLISHMENT_FIELD)


def _from_query(request) -> Any:
    params = getattr(request, "query_params", None)
    if params is None:
        params = getattr(request, "GET", {})
    return params.get(ESTABLISHMENT_FIELD)


def requested_establishment_id(request, view_kwargs: dict | None = None) -> Optional[UUID]:
    """
    Establishment explicitly requested by the caller, or None.

    Looked up in order: URL kwarg, body field, query param, header.
    The first non-empty value wins; it must be a UUID (400 otherwise).
    """
    candidates = (
        (view_kwargs or {}).get(ESTABLISHMENT_FIELD),
        _from_body(request),
        _from_query(request),
        request.headers.get(_header_name()),
    )
    for raw in candidates:
        if raw in (None, ""):
            continue
        return parse_uuid(raw)
    return None
