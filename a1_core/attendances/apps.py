from django.apps import AppConfig


class AttendancesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "a1_core.attendances"
