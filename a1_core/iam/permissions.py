# a1_core/iam/permissions.py

from __future__ import annotations

import logging
from typing import Mapping, Optional

from rest_framework.permissions import SAFE_METHODS, BasePermission

from a1_core.iam.auth import principal_for
from a1_core.iam.exceptions import InsufficientPermission, Unauthenticated
from a1_core.iam.policy import ALL, AccessPolicy, Requirement, RequirementLike, default_access_policy

logger = logging.getLogger(__name__)


def get_access_policy(view) -> AccessPolicy:
    """View-injected policy (tests, alternative role maps) or the process-wide default."""
    policy = getattr(view, "access_policy", None)
    if policy is not None:
        return policy
    return default_access_policy()


def _is_detail(view) -> bool:
    kwargs = getattr(view, "kwargs", {}) or {}
    return "pk" in kwargs or "id" in kwargs


class ActionPermission(BasePermission):
    """
    Token-based permission per view action.

    Views declare:
        required_permissions = {
            "list": any_of(P.MANAGE_PATIENTS, P.MANAGE_ATTENDANCES),
            "create": P.MANAGE_PATIENTS,
            ...
        }

    - Unauthenticated callers get 401 before any token is looked at.
    - If the action is missing and the request is SAFE, fall back to
      list/retrieve so extra read-only @action routes inherit read rights.
    - Unknown action => deny.
    """

    def _infer_action(self, request, view) -> Optional[str]:
        action = getattr(view, "action", None)
        if action:
            return action

        # fallback inference when action isn't set (plain APIView)
        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if _is_detail(view) else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def _requirement(self, request, view) -> Optional[RequirementLike]:
        rules: Mapping[str, RequirementLike] = getattr(view, "required_permissions", {}) or {}
        action = self._infer_action(request, view)

        requirement = rules.get(action) if action else None
        if requirement is None and request.method in SAFE_METHODS:
            fallbacks = ("retrieve", "list") if _is_detail(view) else ("list",)
            for name in fallbacks:
                requirement = rules.get(name)
                if requirement is not None:
                    break
        return requirement

    def has_permission(self, request, view) -> bool:
        policy = get_access_policy(view)
        principal = principal_for(request.user)
        if principal is None:
            raise Unauthenticated()

        requirement = self._requirement(request, view)
        if requirement is None:
            logger.warning(
                "No permission declared: view=%s method=%s user_id=%s",
                view.__class__.__name__,
                request.method,
                principal.user_id,
            )
            raise InsufficientPermission()

        policy.check(principal, requirement)
        return True

    def has_object_permission(self, request, view, obj) -> bool:
        # Object-level access is the ownership check, run by EstablishmentScopedMixin.
        return True


def permission_required(*tokens: str, mode: str = ALL) -> type[BasePermission]:
    """
    Permission class factory for APIViews that need one fixed requirement:

        permission_classes = [permission_required(P.VIEW_REPORTS)]
    """
    requirement = Requirement(frozenset(str(t) for t in tokens), mode)

    class RequiresPermission(BasePermission):
        def has_permission(self, request, view) -> bool:
            get_access_policy(view).check(principal_for(request.user), requirement)
            return True

    RequiresPermission.__name__ = f"RequiresPermission[{requirement}]"
    RequiresPermission.requirement = requirement
    return RequiresPermission


def profile_required(*profiles: str) -> type[BasePermission]:
    """Role allow-list variant of permission_required."""
    allowed = frozenset(str(p) for p in profiles)

    class RequiresProfile(BasePermission):
        def has_permission(self, request, view) -> bool:
            get_access_policy(view).check_profile(principal_for(request.user), allowed)
            return True

    RequiresProfile.__name__ = f"RequiresProfile[{', '.join(sorted(allowed))}]"
    RequiresProfile.profiles = allowed
    return RequiresProfile
