# a1_core/audit/models.py
from django.conf import settings
from django.db import models

from a1_core.common.models import UUIDModel


class AuditEvent(UUIDModel):
    """
    Immutable audit record written by every write service.
    `establishment_id` is null for network-wide records (e.g. a system user).
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "attendance.created"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Attendance"
    entity_id = models.UUIDField(db_index=True)

    establishment_id = models.UUIDField(null=True, blank=True, db_index=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_events",
        null=True,
        blank=True,
    )

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["establishment_id", "occurred_at"], name="audit_est_occurred_idx"),
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
        ]
