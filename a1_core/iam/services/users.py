# a1_core/iam/services/users.py
"""
User administration. Creating a user means creating the auth user and its
A1 profile together; users are deactivated, never deleted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from a1_core.audit.services import AuditService
from a1_core.establishments.models import Establishment
from a1_core.iam.exceptions import EstablishmentContextDenied, InsufficientPermission
from a1_core.iam.models import UserProfile
from a1_core.iam.policy import AccessPolicy, Principal
from a1_core.iam.profiles import PermissionToken, Profile

logger = logging.getLogger(__name__)

ESTABLISHMENT_REQUIRED_MSG = "This profile requires an establishment."
GRANT_DENIED_MSG = "You may not grant a profile with access to all establishments."
MANAGE_DENIED_MSG = "You may not manage an account with access to all establishments."


@dataclass(frozen=True)
class UserUpdate:
    full_name: Optional[str] = None
    email: Optional[str] = None
    profile: Optional[str] = None
    establishment_id: Optional[UUID] = None
    # establishment_id=None is ambiguous; this flag clears it explicitly
    clear_establishment: bool = False


def _active_establishment(establishment_id: UUID) -> Establishment:
    est = Establishment.objects.filter(id=establishment_id).first()
    if est is None or not est.is_active:
        raise ValidationError({"establishment_id": "Establishment not found or inactive."})
    return est


class UserService:
    """
    Every method takes the acting principal and the policy so the same rules
    that guard requests also guard what a caller may hand out:

    - restricted callers only manage users of their own establishment
    - callers without `view_all_establishments` cannot grant it
    """

    def __init__(self, policy: AccessPolicy):
        self.policy = policy

    def _check_grant(self, actor: Principal, profile: str) -> None:
        if profile not in Profile.values:
            raise ValidationError({"profile": "Invalid profile."})

        grants_all = self.policy.role_map.grants(profile, PermissionToken.VIEW_ALL_ESTABLISHMENTS)
        if grants_all and not self.policy.is_unrestricted(actor):
            logger.warning("Profile grant denied: user_id=%s profile=%s", actor.user_id, profile)
            raise InsufficientPermission(GRANT_DENIED_MSG)

    def _resolve_establishment(self, actor: Principal, profile: str, establishment_id: UUID | None):
        if not self.policy.is_unrestricted(actor):
            if establishment_id is None:
                establishment_id = actor.establishment_id
            elif establishment_id != actor.establishment_id:
                raise EstablishmentContextDenied()

        if establishment_id is None:
            if self.policy.role_map.grants(profile, PermissionToken.VIEW_ALL_ESTABLISHMENTS):
                return None
            raise ValidationError({"establishment_id": ESTABLISHMENT_REQUIRED_MSG})

        return _active_establishment(establishment_id)

    def _check_target(self, actor: Principal, up: UserProfile) -> None:
        """Only unrestricted callers manage accounts that see every establishment."""
        grants_all = self.policy.role_map.grants(up.profile, PermissionToken.VIEW_ALL_ESTABLISHMENTS)
        if grants_all and not self.policy.is_unrestricted(actor):
            logger.warning("Account management denied: user_id=%s target=%s", actor.user_id, up.id)
            raise InsufficientPermission(MANAGE_DENIED_MSG)

    @transaction.atomic
    def create_user(
        self,
        *,
        actor: Principal,
        username: str,
        password: str,
        profile: str,
        email: str = "",
        full_name: str = "",
        establishment_id: UUID | None = None,
    ) -> UserProfile:
        self._check_grant(actor, profile)
        establishment = self._resolve_establishment(actor, profile, establishment_id)

        User = get_user_model()
        if User.objects.filter(username=username).exists():
            raise ValidationError({"username": "A user with this username already exists."})

        user = User.objects.create_user(username=username, password=password, email=email or "")
        user_profile = UserProfile.objects.create(
            user=user,
            profile=profile,
            establishment=establishment,
            full_name=full_name or "",
            is_active=True,
        )

        AuditService.log(
            event_code="user.created",
            entity_type="UserProfile",
            entity_id=user_profile.id,
            establishment_id=user_profile.establishment_id,
            actor_user_id=actor.user_id,
            metadata={"username": username, "profile": profile},
        )
        return user_profile

    @transaction.atomic
    def update_user(self, *, actor: Principal, user_profile_id: UUID, patch: UserUpdate) -> UserProfile:
        up = UserProfile.objects.select_for_update().select_related("user").get(id=user_profile_id)
        self._check_target(actor, up)
        changes: dict = {}

        profile = patch.profile or up.profile
        if patch.profile is not None and patch.profile != up.profile:
            self._check_grant(actor, patch.profile)
            changes["profile"] = [up.profile, patch.profile]
            up.profile = patch.profile

        if patch.clear_establishment or patch.establishment_id is not None or patch.profile is not None:
            if patch.clear_establishment:
                target = None
            elif patch.establishment_id is not None:
                target = patch.establishment_id
            else:
                target = up.establishment_id
            establishment = self._resolve_establishment(actor, profile, target)
            new_id = establishment.id if establishment else None
            if new_id != up.establishment_id:
                changes["establishment_id"] = [
                    str(up.establishment_id) if up.establishment_id else None,
                    str(new_id) if new_id else None,
                ]
            up.establishment = establishment

        if patch.full_name is not None:
            up.full_name = patch.full_name
            changes["full_name"] = patch.full_name

        if patch.email is not None:
            up.user.email = patch.email
            up.user.save(update_fields=["email"])
            changes["email"] = patch.email

        up.save()

        AuditService.log(
            event_code="user.updated",
            entity_type="UserProfile",
            entity_id=up.id,
            establishment_id=up.establishment_id,
            actor_user_id=actor.user_id,
            metadata={"changes": changes},
        )
        return up

    @transaction.atomic
    def deactivate_user(self, *, actor: Principal, user_profile_id: UUID) -> UserProfile:
        up = UserProfile.objects.select_for_update().select_related("user").get(id=user_profile_id)
        self._check_target(actor, up)
        if up.id == actor.profile_id:
            raise ValidationError({"detail": "You cannot deactivate your own account."})
        if not up.is_active:
            return up

        up.is_active = False
        up.deactivated_at = timezone.now()
        up.save(update_fields=["is_active", "deactivated_at", "updated_at"])

        up.user.is_active = False
        up.user.save(update_fields=["is_active"])

        AuditService.log(
            event_code="user.deactivated",
            entity_type="UserProfile",
            entity_id=up.id,
            establishment_id=up.establishment_id,
            actor_user_id=actor.user_id,
            metadata={},
        )
        return up

    @transaction.atomic
    def reset_password(self, *, actor: Principal, user_profile_id: UUID, password: str) -> UserProfile:
        up = UserProfile.objects.select_related("user").get(id=user_profile_id)
        self._check_target(actor, up)
        up.user.set_password(password)
        up.user.save(update_fields=["password"])

        AuditService.log(
            event_code="user.password_reset",
            entity_type="UserProfile",
            entity_id=up.id,
            establishment_id=up.establishment_id,
            actor_user_id=actor.user_id,
            metadata={},
        )
        return up
