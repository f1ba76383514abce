from __future__ import annotations

from django.contrib import admin

from a1_core.attendances.models import Attendance


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "establishment", "status", "started_at", "finished_at")
    list_filter = ("status", "establishment")
    search_fields = ("patient__full_name", "patient__document", "reason")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("-started_at",)
