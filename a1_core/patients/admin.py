from __future__ import annotations

from django.contrib import admin

from a1_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("full_name", "document", "birth_date", "phone", "created_at")
    search_fields = ("full_name", "document", "email")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("full_name",)
