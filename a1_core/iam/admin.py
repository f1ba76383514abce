# a1_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from a1_core.iam.models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "profile", "establishment", "is_active", "created_at", "updated_at")
    list_filter = ("profile", "is_active", "establishment")
    search_fields = ("user__username", "user__email", "full_name")
    autocomplete_fields = ("user",)
    ordering = ("-created_at",)
