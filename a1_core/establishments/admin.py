from __future__ import annotations

from django.contrib import admin

from a1_core.establishments.models import Establishment


@admin.register(Establishment)
class EstablishmentAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "code",
        "establishment_type",
        "is_active",
        "city",
        "state",
        "updated_at",
    )
    list_filter = ("is_active", "establishment_type", "state")
    search_fields = ("name", "code", "cnes", "city")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("name",)
