# a1_core/attendances/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone

from a1_core.common.models import UUIDModel
from a1_core.establishments.models import Establishment
from a1_core.patients.models import Patient


class AttendanceStatus(models.TextChoices):
    WAITING = "waiting", "Waiting"
    IN_PROGRESS = "in_progress", "In progress"
    FINISHED = "finished", "Finished"
    CANCELLED = "cancelled", "Cancelled"


TERMINAL_STATUSES = frozenset({AttendanceStatus.FINISHED, AttendanceStatus.CANCELLED})


class Attendance(UUIDModel):
    """
    A patient visit at one establishment. The only link between a patient and
    an establishment.
    """

    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name="attendances")
    establishment = models.ForeignKey(Establishment, on_delete=models.PROTECT, related_name="attendances")

    status = models.CharField(
        max_length=16,
        choices=AttendanceStatus.choices,
        default=AttendanceStatus.WAITING,
        db_index=True,
    )
    reason = models.CharField(max_length=255, blank=True, default="")
    started_at = models.DateTimeField(default=timezone.now, db_index=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="attendances_created",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "attendances_attendance"
        indexes = [
            models.Index(fields=["establishment", "status"], name="att_est_status_idx"),
            models.Index(fields=["patient", "started_at"], name="att_patient_started_idx"),
        ]

    def __str__(self) -> str:
        return f"Attendance {self.id} ({self.status})"
