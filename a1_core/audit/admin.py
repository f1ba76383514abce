from __future__ import annotations

from django.contrib import admin

from a1_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ("occurred_at", "event_code", "entity_type", "entity_id", "establishment_id", "actor_user")
    list_filter = ("event_code", "entity_type")
    search_fields = ("entity_id", "event_code")
    ordering = ("-occurred_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
