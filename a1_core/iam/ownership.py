# a1_core/iam/ownership.py
"""
Ownership validation for single-resource routes.

The resolver answers "which establishment(s) own this record?" with the
same annotated querysets list endpoints filter on, so a record that shows
up in a scoped list is exactly a record that passes ownership.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import models
from django.db.models import Exists, F, OuterRef, Q, QuerySet, Subquery
from rest_framework.exceptions import NotFound

from a1_core.attendances.models import Attendance
from a1_core.common.api.exceptions import InternalError, InvalidResourceType, MissingResourceId
from a1_core.establishments.models import Establishment
from a1_core.iam.exceptions import Unauthenticated
from a1_core.iam.models import UserProfile
from a1_core.iam.policy import AccessPolicy, Principal
from a1_core.iam.scope import EstablishmentScope
from a1_core.patients.models import Patient

logger = logging.getLogger(__name__)

OWNER_FIELD = "owner_establishment_id"
RESOURCE_NOT_FOUND_MSG = "Resource not found."


class ResourceType(models.TextChoices):
    USER = "user", "User"
    PATIENT = "patient", "Patient"
    ATTENDANCE = "attendance", "Attendance"
    ESTABLISHMENT = "establishment", "Establishment"


class PatientOwnership(models.TextChoices):
    # Establishment of the most recent attendance
    LATEST_ATTENDANCE = "latest_attendance", "Latest attendance"
    # Every establishment where the patient has an attendance
    ANY_ATTENDANCE = "any_attendance", "Any attendance"


# Patients without attendances are reachable by every establishment.
UNOWNED_ALLOWED = frozenset({ResourceType.PATIENT.value})


@dataclass(frozen=True)
class ResourceOwner:
    resource_type: str
    resource_id: UUID
    establishment_ids: frozenset = field(default_factory=frozenset)
    allow_unowned: bool = False

    @property
    def establishment_id(self) -> Optional[UUID]:
        """Single owning establishment, or None when unowned or shared."""
        if len(self.establishment_ids) == 1:
            return next(iter(self.establishment_ids))
        return None


class OwnershipResolver(Protocol):
    def find_owner(self, resource_type: str, resource_id: str) -> Optional[ResourceOwner]:
        ...

    def scope_queryset(
        self,
        resource_type: str,
        scope: EstablishmentScope,
        queryset: Optional[QuerySet] = None,
    ) -> QuerySet:
        ...


def _latest_attendance_establishment():
    return Subquery(
        Attendance.objects.filter(patient_id=OuterRef("pk"))
        .order_by("-started_at", "-created_at")
        .values("establishment_id")[:1],
        output_field=models.UUIDField(),
    )


def patient_ownership_from_settings() -> str:
    raw = getattr(settings, "IAM_PATIENT_OWNERSHIP", PatientOwnership.LATEST_ATTENDANCE)
    if raw not in PatientOwnership.values:
        raise ImproperlyConfigured(
            f"IAM_PATIENT_OWNERSHIP must be one of {', '.join(PatientOwnership.values)}; got {raw!r}"
        )
    return raw


class OrmOwnershipResolver:
    """
    ORM-backed resolver. Every resource type gets one queryset annotated with
    `owner_establishment_id`; both `find_owner` and `scope_queryset` read it.
    """

    def __init__(self, patient_ownership: Optional[str] = None):
        self.patient_ownership = patient_ownership or patient_ownership_from_settings()

    def owner_expression(self, resource_type: str):
        if resource_type == ResourceType.ESTABLISHMENT:
            return F("id")
        if resource_type in (ResourceType.USER, ResourceType.ATTENDANCE):
            return F("establishment_id")
        if resource_type == ResourceType.PATIENT:
            return _latest_attendance_establishment()
        raise InvalidResourceType()

    def queryset_for(self, resource_type: str) -> QuerySet:
        if resource_type == ResourceType.ESTABLISHMENT:
            qs = Establishment.objects.all()
        elif resource_type == ResourceType.USER:
            qs = UserProfile.objects.select_related("user", "establishment")
        elif resource_type == ResourceType.ATTENDANCE:
            qs = Attendance.objects.select_related("patient", "establishment")
        elif resource_type == ResourceType.PATIENT:
            qs = Patient.objects.all()
        else:
            raise InvalidResourceType()
        return qs.annotate(**{OWNER_FIELD: self.owner_expression(resource_type)})

    def find_owner(self, resource_type: str, resource_id: str) -> Optional[ResourceOwner]:
        try:
            pk = UUID(str(resource_id))
        except (TypeError, ValueError):
            return None

        qs = self.queryset_for(resource_type)
        row = qs.filter(pk=pk).values(OWNER_FIELD).first()
        if row is None:
            return None

        if resource_type == ResourceType.PATIENT and self.patient_ownership == PatientOwnership.ANY_ATTENDANCE:
            raw_owners = Attendance.objects.filter(patient_id=pk).values_list("establishment_id", flat=True).distinct()
        else:
            raw_owners = [row[OWNER_FIELD]]
        # SQLite hands back hex strings for UUID columns
        owners = frozenset(UUID(str(value)) for value in raw_owners if value is not None)

        return ResourceOwner(
            resource_type=str(resource_type),
            resource_id=pk,
            establishment_ids=owners,
            allow_unowned=str(resource_type) in UNOWNED_ALLOWED,
        )

    def scope_queryset(
        self,
        resource_type: str,
        scope: EstablishmentScope,
        queryset: Optional[QuerySet] = None,
    ) -> QuerySet:
        qs = queryset if queryset is not None else self.queryset_for(resource_type)
        if scope.establishment_id is None:
            return qs

        if OWNER_FIELD not in qs.query.annotations:
            qs = qs.annotate(**{OWNER_FIELD: self.owner_expression(resource_type)})

        if resource_type != ResourceType.PATIENT:
            return qs.filter(**{OWNER_FIELD: scope.establishment_id})

        if self.patient_ownership == PatientOwnership.ANY_ATTENDANCE:
            seen_here = Exists(
                Attendance.objects.filter(patient_id=OuterRef("pk"), establishment_id=scope.establishment_id)
            )
            seen_anywhere = Exists(Attendance.objects.filter(patient_id=OuterRef("pk")))
            return qs.filter(seen_here | ~seen_anywhere)

        return qs.filter(Q(**{OWNER_FIELD: scope.establishment_id}) | Q(**{f"{OWNER_FIELD}__isnull": True}))


class OwnershipValidator:
    """
    Single-resource check, in this order:
      401 no principal, 400 missing id, 400 unknown type,
      500 resolver failure, 404 not found, 403 outside scope.
    """

    def __init__(self, policy: AccessPolicy, resolver: OwnershipResolver):
        self.policy = policy
        self.resolver = resolver

    def validate(self, principal: Optional[Principal], resource_type: str, resource_id) -> ResourceOwner:
        if principal is None:
            raise Unauthenticated()

        raw_id = "" if resource_id is None else str(resource_id).strip()
        if not raw_id:
            raise MissingResourceId()

        if resource_type not in ResourceType.values:
            raise InvalidResourceType()

        try:
            owner = self.resolver.find_owner(resource_type, raw_id)
        except Exception:
            logger.exception(
                "Ownership lookup failed: resource=%s:%s user_id=%s",
                resource_type,
                raw_id,
                principal.user_id,
            )
            raise InternalError()

        if owner is None:
            raise NotFound(RESOURCE_NOT_FOUND_MSG)

        self.policy.ensure_in_scope(principal, owner)
        return owner
