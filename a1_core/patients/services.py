# a1_core/patients/services.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import ValidationError

from a1_core.audit.services import AuditService
from a1_core.iam.policy import Principal
from a1_core.iam.scope import EstablishmentScope
from a1_core.patients.models import Patient


@dataclass(frozen=True)
class PatientUpdate:
    full_name: Optional[str] = None
    document: Optional[str] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None
    email: Optional[str] = None


def _ensure_document_free(document: str | None, *, exclude_id: UUID | None = None) -> None:
    if not document:
        return
    qs = Patient.objects.filter(document=document)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise ValidationError({"document": "A patient with this document already exists."})


class PatientService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Principal,
        scope: EstablishmentScope,
        full_name: str,
        document: str | None = None,
        birth_date: date | None = None,
        phone: str = "",
        email: str = "",
    ) -> Patient:
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError({"full_name": "This field is required."})
        _ensure_document_free(document)

        patient = Patient.objects.create(
            full_name=full_name,
            document=document or None,
            birth_date=birth_date,
            phone=phone or "",
            email=email or "",
        )

        AuditService.log(
            event_code="patient.created",
            entity_type="Patient",
            entity_id=patient.id,
            establishment_id=scope.establishment_id,
            actor_user_id=actor.user_id,
            metadata={"full_name": patient.full_name},
        )
        return patient

    @staticmethod
    @transaction.atomic
    def update(*, actor: Principal, scope: EstablishmentScope, patient_id: UUID, patch: PatientUpdate) -> Patient:
        patient = Patient.objects.select_for_update().get(id=patient_id)

        if patch.document is not None and patch.document != patient.document:
            _ensure_document_free(patch.document, exclude_id=patient.id)

        changes = {k: v for k, v in asdict(patch).items() if v is not None}
        for field, value in changes.items():
            setattr(patient, field, value)
        if "document" in changes:
            patient.document = changes["document"] or None
        patient.save()

        AuditService.log(
            event_code="patient.updated",
            entity_type="Patient",
            entity_id=patient.id,
            establishment_id=scope.establishment_id,
            actor_user_id=actor.user_id,
            metadata={"changes": sorted(changes)},
        )
        return patient
