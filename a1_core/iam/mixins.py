# a1_core/iam/mixins.py
from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet

from a1_core.iam.auth import principal_for
from a1_core.iam.ownership import OrmOwnershipResolver, OwnershipValidator, ResourceOwner
from a1_core.iam.permissions import get_access_policy
from a1_core.iam.policy import AccessPolicy, Principal
from a1_core.iam.scope import EstablishmentScope, requested_establishment_id


class EstablishmentScopedMixin:
    """
    Request pipeline for establishment-scoped view sets.

    DRF runs authentication and permission classes in `initial()`; this mixin
    then resolves the request's establishment scope and, on detail routes of
    views declaring `ownership_resource_type`, validates ownership of the
    looked-up record. Handlers read `self.establishment_scope` and
    `self.resource_owner`; the request itself is left untouched.
    """

    establishment_scoped = True

    # One of ResourceType; None disables the single-resource check.
    ownership_resource_type: Optional[str] = None

    # Optional overrides (tests inject doubles here)
    access_policy: Optional[AccessPolicy] = None
    ownership_resolver = None

    establishment_scope: Optional[EstablishmentScope] = None
    resource_owner: Optional[ResourceOwner] = None

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)

        policy = get_access_policy(self)
        principal = self.get_principal()

        self.establishment_scope = policy.resolve_request_scope(
            principal,
            requested_establishment_id(request, kwargs),
        )

        if self.ownership_resource_type and getattr(self, "detail", False):
            lookup = getattr(self, "lookup_url_kwarg", None) or getattr(self, "lookup_field", "pk")
            validator = OwnershipValidator(policy, self.get_ownership_resolver())
            self.resource_owner = validator.validate(principal, self.ownership_resource_type, kwargs.get(lookup))

    def get_principal(self) -> Optional[Principal]:
        return principal_for(self.request.user)

    def get_ownership_resolver(self):
        if self.ownership_resolver is None:
            self.ownership_resolver = OrmOwnershipResolver()
        return self.ownership_resolver

    def scoped_queryset(self, queryset: Optional[QuerySet] = None) -> QuerySet:
        """Records of `ownership_resource_type` visible under the current scope."""
        return self.get_ownership_resolver().scope_queryset(
            self.ownership_resource_type,
            self.establishment_scope,
            queryset,
        )

    def get_owned_object(self):
        """The record validated in `initial()` for this detail route."""
        return (
            self.get_ownership_resolver()
            .queryset_for(self.ownership_resource_type)
            .get(pk=self.resource_owner.resource_id)
        )
