from __future__ import annotations

from rest_framework.exceptions import NotAuthenticated, PermissionDenied

UNAUTHENTICATED_MSG = "User not authenticated."
INSUFFICIENT_PERMISSION_MSG = "Insufficient permission to access this resource."
PROFILE_NOT_AUTHORIZED_MSG = "Profile not authorized to access this resource."
ESTABLISHMENT_CONTEXT_MSG = "You may only operate within your own establishment."
RESOURCE_ACCESS_MSG = "You may only access resources of your own establishment."
NOT_ASSIGNED_MSG = "User is not assigned to any establishment."


class Unauthenticated(NotAuthenticated):
    default_detail = UNAUTHENTICATED_MSG


class InsufficientPermission(PermissionDenied):
    default_detail = INSUFFICIENT_PERMISSION_MSG
    default_code = "permission_denied"


class ProfileNotAuthorized(PermissionDenied):
    default_detail = PROFILE_NOT_AUTHORIZED_MSG
    default_code = "permission_denied"


class EstablishmentContextDenied(PermissionDenied):
    default_detail = ESTABLISHMENT_CONTEXT_MSG
    default_code = "establishment_context_denied"


class ResourceAccessDenied(PermissionDenied):
    default_detail = RESOURCE_ACCESS_MSG
    default_code = "resource_access_denied"


class EstablishmentNotAssigned(PermissionDenied):
    default_detail = NOT_ASSIGNED_MSG
    default_code = "establishment_not_assigned"
