from django.apps import AppConfig


class IamConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "a1_core.iam"

    def ready(self) -> None:
        # import here so app loading doesn't break tooling
        from a1_core.iam import openapi  # noqa: F401
        from a1_core.iam import signals  # noqa: F401
        from a1_core.iam.policy import default_access_policy

        # Fail fast on a broken IAM_ROLE_MAP
        default_access_policy()
