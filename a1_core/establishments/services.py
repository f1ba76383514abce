# a1_core/establishments/services.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from a1_core.audit.services import AuditService
from a1_core.establishments.models import Establishment, EstablishmentType


@dataclass(frozen=True)
class EstablishmentUpdate:
    name: Optional[str] = None
    code: Optional[str] = None
    establishment_type: Optional[str] = None
    cnes: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    is_active: Optional[bool] = None
    deactivation_reason: Optional[str] = None


def _ensure_code_free(code: str, *, exclude_id: UUID | None = None) -> None:
    qs = Establishment.objects.filter(code=code)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise ValidationError({"code": "An establishment with this code already exists."})


class EstablishmentService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor_user_id: int | None,
        name: str,
        code: str,
        establishment_type: str = EstablishmentType.UBS,
        cnes: str = "",
        phone: str = "",
        city: str = "",
        state: str = "",
    ) -> Establishment:
        if establishment_type not in EstablishmentType.values:
            raise ValidationError({"establishment_type": "Invalid establishment_type."})
        _ensure_code_free(code)

        est = Establishment.objects.create(
            name=name,
            code=code,
            establishment_type=establishment_type,
            cnes=cnes or "",
            phone=phone or "",
            city=city or "",
            state=(state or "").upper(),
            is_active=True,
        )

        AuditService.log(
            event_code="establishment.created",
            entity_type="Establishment",
            entity_id=est.id,
            establishment_id=est.id,
            actor_user_id=actor_user_id,
            metadata={"code": est.code, "establishment_type": est.establishment_type},
        )
        return est

    @staticmethod
    @transaction.atomic
    def update(*, actor_user_id: int | None, establishment_id: UUID, patch: EstablishmentUpdate) -> Establishment:
        est = Establishment.objects.select_for_update().get(id=establishment_id)

        if patch.establishment_type is not None:
            if patch.establishment_type not in EstablishmentType.values:
                raise ValidationError({"establishment_type": "Invalid establishment_type."})
            est.establishment_type = patch.establishment_type

        if patch.code is not None and patch.code != est.code:
            _ensure_code_free(patch.code, exclude_id=est.id)
            est.code = patch.code

        mapping = {
            "name": patch.name,
            "cnes": patch.cnes,
            "phone": patch.phone,
            "city": patch.city,
            "state": patch.state.upper() if patch.state is not None else None,
        }
        for field, value in mapping.items():
            if value is not None:
                setattr(est, field, value)

        # activation/deactivation
        if patch.is_active is not None:
            if patch.is_active is False:
                est.is_active = False
                est.deactivated_at = est.deactivated_at or timezone.now()
                if patch.deactivation_reason is not None:
                    est.deactivation_reason = patch.deactivation_reason or ""
            else:
                est.is_active = True
                est.deactivated_at = None
                est.deactivation_reason = ""

        est.save()

        AuditService.log(
            event_code="establishment.updated",
            entity_type="Establishment",
            entity_id=est.id,
            establishment_id=est.id,
            actor_user_id=actor_user_id,
            metadata={"changes": {k: v for k, v in asdict(patch).items() if v is not None}},
        )
        return est

    @staticmethod
    @transaction.atomic
    def deactivate(*, actor_user_id: int | None, establishment_id: UUID, reason: str = "") -> Establishment:
        est = Establishment.objects.select_for_update().get(id=establishment_id)
        if not est.is_active:
            return est

        est.is_active = False
        est.deactivated_at = timezone.now()
        est.deactivation_reason = (reason or "").strip()
        est.save(update_fields=["is_active", "deactivated_at", "deactivation_reason", "updated_at"])

        AuditService.log(
            event_code="establishment.deactivated",
            entity_type="Establishment",
            entity_id=est.id,
            establishment_id=est.id,
            actor_user_id=actor_user_id,
            metadata={"reason": est.deactivation_reason},
        )
        return est
