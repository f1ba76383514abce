# a1_core/establishments/models.py
from __future__ import annotations

from django.db import models

from a1_core.common.models import UUIDModel


class EstablishmentType(models.TextChoices):
    UBS = "ubs", "Clinic (UBS)"
    UPA = "upa", "Urgent care unit (UPA)"
    HOSPITAL = "hospital", "Hospital"


class Establishment(UUIDModel):
    """
    A clinical site. The tenancy boundary: users, attendances and (through
    attendances) patients are all scoped by establishment.

    Never hard-deleted; deactivation keeps historical records resolvable.
    """

    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64, unique=True)

    establishment_type = models.CharField(
        max_length=16,
        choices=EstablishmentType.choices,
        default=EstablishmentType.UBS,
        db_index=True,
    )

    # National health facility registry number (CNES), optional
    cnes = models.CharField(max_length=16, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    city = models.CharField(max_length=128, blank=True, default="")
    state = models.CharField(max_length=2, blank=True, default="")

    # Lifecycle
    is_active = models.BooleanField(default=True, db_index=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)
    deactivation_reason = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "establishments_establishment"
        indexes = [
            models.Index(fields=["establishment_type", "is_active"], name="est_type_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"
