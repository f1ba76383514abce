# a1_core/attendances/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from a1_core.attendances.models import Attendance
from a1_core.iam.scope import EstablishmentScope


def with_status(qs: QuerySet[Attendance], status: str | None = None) -> QuerySet[Attendance]:
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-started_at")


def attendances_in_scope(*, scope: EstablishmentScope, status: str | None = None) -> QuerySet[Attendance]:
    return with_status(scope.filter(Attendance.objects.select_related("patient", "establishment")), status)


def attendances_for_patient(*, patient_id: UUID, scope: EstablishmentScope) -> QuerySet[Attendance]:
    return attendances_in_scope(scope=scope).filter(patient_id=patient_id)
