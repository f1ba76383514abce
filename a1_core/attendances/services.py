# a1_core/attendances/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from a1_core.attendances.models import TERMINAL_STATUSES, Attendance, AttendanceStatus
from a1_core.audit.services import AuditService
from a1_core.establishments.models import Establishment
from a1_core.iam.exceptions import ResourceAccessDenied
from a1_core.iam.ownership import OrmOwnershipResolver, OwnershipResolver, ResourceType
from a1_core.iam.policy import Principal
from a1_core.iam.scope import EstablishmentScope
from a1_core.patients.models import Patient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceUpdate:
    status: Optional[str] = None
    reason: Optional[str] = None


class AttendanceService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Principal,
        scope: EstablishmentScope,
        patient_id: UUID,
        reason: str = "",
        started_at: datetime | None = None,
        resolver: Optional[OwnershipResolver] = None,
    ) -> Attendance:
        """
        The establishment always comes from the resolved scope: the home
        establishment for restricted profiles, the requested one otherwise.

        Restricted callers may only open attendances for patients they can
        already see (unowned, or owned by their home establishment), so an
        attendance cannot be used to take over another establishment's patient.
        """
        if scope.establishment_id is None:
            raise ValidationError({"establishment_id": "This field is required."})

        establishment = Establishment.objects.filter(id=scope.establishment_id, is_active=True).first()
        if establishment is None:
            raise ValidationError({"establishment_id": "Establishment not found or inactive."})

        if not Patient.objects.filter(id=patient_id).exists():
            raise ValidationError({"patient_id": "Patient not found."})

        if not scope.unrestricted:
            resolver = resolver or OrmOwnershipResolver()
            visible = resolver.scope_queryset(ResourceType.PATIENT, scope).filter(id=patient_id)
            if not visible.exists():
                logger.warning(
                    "Attendance denied for out-of-scope patient: user_id=%s patient=%s establishment=%s",
                    actor.user_id,
                    patient_id,
                    scope.establishment_id,
                )
                raise ResourceAccessDenied()

        now = timezone.now()
        if started_at is not None and started_at > now:
            raise ValidationError({"started_at": "Start time cannot be in the future."})

        att = Attendance.objects.create(
            patient_id=patient_id,
            establishment=establishment,
            status=AttendanceStatus.WAITING,
            reason=reason or "",
            started_at=started_at or now,
            created_by_id=actor.user_id,
        )

        AuditService.log(
            event_code="attendance.created",
            entity_type="Attendance",
            entity_id=att.id,
            establishment_id=establishment.id,
            actor_user_id=actor.user_id,
            metadata={"patient_id": str(patient_id)},
        )
        return att

    @staticmethod
    @transaction.atomic
    def update(*, actor: Principal, attendance_id: UUID, patch: AttendanceUpdate) -> Attendance:
        att = Attendance.objects.select_for_update().get(id=attendance_id)
        changes: dict = {}

        if patch.status is not None and patch.status != att.status:
            if att.status in TERMINAL_STATUSES:
                raise ValidationError({"status": f"Attendance is already {att.status}."})
            if patch.status not in AttendanceStatus.values:
                raise ValidationError({"status": "Invalid status."})
            changes["status"] = [att.status, patch.status]
            att.status = patch.status
            if patch.status in TERMINAL_STATUSES:
                att.finished_at = timezone.now()

        if patch.reason is not None:
            att.reason = patch.reason
            changes["reason"] = patch.reason

        att.save()

        AuditService.log(
            event_code="attendance.updated",
            entity_type="Attendance",
            entity_id=att.id,
            establishment_id=att.establishment_id,
            actor_user_id=actor.user_id,
            metadata={"changes": changes},
        )
        return att
