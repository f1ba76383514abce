# a1_core/iam/models.py
from django.conf import settings
from django.db import models

from a1_core.common.models import UUIDModel
from a1_core.establishments.models import Establishment
from a1_core.iam.profiles import Profile


class UserProfile(UUIDModel):
    """
    A1 user profile anchored to Django's AUTH_USER_MODEL.

    Carries the role (`profile`) and the home establishment. System-wide
    profiles may have no establishment. Never hard-deleted: deactivation
    flips `is_active` here and on the auth user.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="a1_profile",
    )
    profile = models.CharField(max_length=32, choices=Profile.choices, db_index=True)
    establishment = models.ForeignKey(
        Establishment,
        on_delete=models.PROTECT,
        related_name="user_profiles",
        null=True,
        blank=True,
    )

    full_name = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["establishment", "is_active"], name="iam_profile_est_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}:{self.profile}"
