# a1_core/iam/policy.py
"""
Authorization decisions.

`AccessPolicy` is the one component that answers both questions the API
asks on every request:

  1. may this principal perform the action? (permission tokens)
  2. which establishments may this principal see or touch? (scope)

List endpoints use it to build their `where` clause; single-resource
endpoints use it (through OwnershipValidator) to compare a resource owner
with the caller's scope. Both paths share the same rules.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Iterable, Optional, Union
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from a1_core.iam.exceptions import (
    EstablishmentContextDenied,
    EstablishmentNotAssigned,
    InsufficientPermission,
    ProfileNotAuthorized,
    ResourceAccessDenied,
    Unauthenticated,
)
from a1_core.iam.profiles import PermissionToken, RoleMap
from a1_core.iam.scope import EstablishmentScope

if TYPE_CHECKING:
    from a1_core.iam.ownership import ResourceOwner

logger = logging.getLogger(__name__)

ANY = "any"
ALL = "all"


@dataclass(frozen=True)
class Principal:
    """
    Authenticated-user context: who is calling, with which profile, from
    which home establishment (None for system-wide accounts).
    """
    user_id: int
    profile_id: UUID
    profile: str
    establishment_id: Optional[UUID] = None


@dataclass(frozen=True)
class Requirement:
    tokens: frozenset
    mode: str = ALL

    def __post_init__(self):
        if not self.tokens:
            raise ValueError("Requirement needs at least one permission token.")
        if self.mode not in (ANY, ALL):
            raise ValueError(f"Unknown requirement mode: {self.mode!r}")

    def is_met_by(self, granted: frozenset) -> bool:
        if self.mode == ANY:
            return bool(self.tokens & granted)
        return self.tokens <= granted

    def __str__(self) -> str:
        return f"{self.mode}_of({', '.join(sorted(self.tokens))})"


def any_of(*tokens: str) -> Requirement:
    return Requirement(frozenset(str(t) for t in tokens), ANY)


def all_of(*tokens: str) -> Requirement:
    return Requirement(frozenset(str(t) for t in tokens), ALL)


RequirementLike = Union[Requirement, str, Iterable[str]]


def as_requirement(value: RequirementLike) -> Requirement:
    if isinstance(value, Requirement):
        return value
    if isinstance(value, str):
        return all_of(value)
    return all_of(*value)


class AccessPolicy:
    def __init__(self, role_map: RoleMap):
        self.role_map = role_map

    # -----------------------------
    # Permission checks
    # -----------------------------

    def permissions_for(self, principal: Optional[Principal]) -> frozenset:
        if principal is None:
            return frozenset()
        return self.role_map.permissions_for(principal.profile)

    def has_permission(self, principal: Optional[Principal], token: str) -> bool:
        return str(token) in self.permissions_for(principal)

    def allows(self, principal: Optional[Principal], requirement: RequirementLike) -> bool:
        return as_requirement(requirement).is_met_by(self.permissions_for(principal))

    def check(self, principal: Optional[Principal], requirement: RequirementLike) -> None:
        """
        401 if unauthenticated, 403 if the requirement is not met.
        The denial never names the missing token; it is only logged.
        """
        if principal is None:
            raise Unauthenticated()

        req = as_requirement(requirement)
        if not req.is_met_by(self.permissions_for(principal)):
            logger.warning(
                "Permission denied: user_id=%s profile=%s required=%s",
                principal.user_id,
                principal.profile,
                req,
            )
            raise InsufficientPermission()

    def check_profile(self, principal: Optional[Principal], profiles: Iterable[str]) -> None:
        if principal is None:
            raise Unauthenticated()

        allowed = {str(p) for p in profiles}
        if principal.profile not in allowed:
            logger.warning(
                "Profile denied: user_id=%s profile=%s allowed=%s",
                principal.user_id,
                principal.profile,
                sorted(allowed),
            )
            raise ProfileNotAuthorized()

    # -----------------------------
    # Establishment scope
    # -----------------------------

    def is_unrestricted(self, principal: Optional[Principal]) -> bool:
        return self.has_permission(principal, PermissionToken.VIEW_ALL_ESTABLISHMENTS)

    def scope_for(self, principal: Optional[Principal]) -> EstablishmentScope:
        if principal is None:
            raise Unauthenticated()

        if self.is_unrestricted(principal):
            return EstablishmentScope(unrestricted=True)

        if principal.establishment_id is None:
            logger.warning(
                "Restricted profile without establishment: user_id=%s profile=%s",
                principal.user_id,
                principal.profile,
            )
            raise EstablishmentNotAssigned()

        return EstablishmentScope(unrestricted=False, establishment_id=principal.establishment_id)

    def resolve_request_scope(
        self,
        principal: Optional[Principal],
        requested_establishment_id: Optional[UUID] = None,
    ) -> EstablishmentScope:
        """
        Effective scope for one request.

        - unrestricted: the requested establishment (if any) narrows results
        - restricted, nothing requested: pinned to the home establishment
        - restricted, home requested: same
        - restricted, another establishment requested: 403
        """
        base = self.scope_for(principal)

        if base.unrestricted:
            return EstablishmentScope(unrestricted=True, establishment_id=requested_establishment_id)

        if requested_establishment_id is None or requested_establishment_id == base.establishment_id:
            return base

        logger.warning(
            "Establishment context denied: user_id=%s home=%s requested=%s",
            principal.user_id,
            base.establishment_id,
            requested_establishment_id,
        )
        raise EstablishmentContextDenied()

    def ensure_in_scope(self, principal: Optional[Principal], owner: "ResourceOwner") -> None:
        if principal is None:
            raise Unauthenticated()

        if self.is_unrestricted(principal):
            return

        if not owner.establishment_ids:
            if owner.allow_unowned:
                return
        elif principal.establishment_id is not None and principal.establishment_id in owner.establishment_ids:
            return

        logger.warning(
            "Resource access denied: user_id=%s home=%s resource=%s:%s owners=%s",
            principal.user_id,
            principal.establishment_id,
            owner.resource_type,
            owner.resource_id,
            sorted(str(e) for e in owner.establishment_ids),
        )
        raise ResourceAccessDenied()


@lru_cache(maxsize=1)
def default_access_policy() -> AccessPolicy:
    """
    Process-wide policy built from `settings.IAM_ROLE_MAP` (dotted path to a
    RoleMap or to a plain profile -> tokens mapping). Reset on setting change.
    """
    path = getattr(settings, "IAM_ROLE_MAP", "a1_core.iam.profiles.DEFAULT_ROLE_MAP")
    try:
        role_map = import_string(path)
    except ImportError as exc:
        raise ImproperlyConfigured(f"IAM_ROLE_MAP could not be imported: {path}") from exc

    if not isinstance(role_map, RoleMap):
        role_map = RoleMap(role_map)
    return AccessPolicy(role_map)
