# a1_core/iam/signals.py
from __future__ import annotations

from django.core.signals import setting_changed
from django.dispatch import receiver

from a1_core.iam.policy import default_access_policy


@receiver(setting_changed)
def reset_access_policy(sender, setting, **kwargs):
    if setting == "IAM_ROLE_MAP":
        default_access_policy.cache_clear()
