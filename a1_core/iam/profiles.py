# a1_core/iam/profiles.py
"""
Profile registry: the fixed set of user profiles (roles) and the static
profile -> permission token table.

The table is data, not a singleton. `DEFAULT_ROLE_MAP` is built once at
import time and handed to `AccessPolicy`; tests and deployments can point
`settings.IAM_ROLE_MAP` at a different `RoleMap`.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from django.core.exceptions import ImproperlyConfigured
from django.db import models


class Profile(models.TextChoices):
    SYSTEM_MASTER = "system_master", "System master"
    TOTAL_MANAGER = "total_manager", "Total manager"
    GENERAL_MANAGER = "general_manager", "General manager"
    LOCAL_MANAGER = "local_manager", "Local manager"
    GENERAL_DIRECTOR = "general_director", "General director"
    LOCAL_DIRECTOR = "local_director", "Local director"
    GENERAL_COORDINATOR = "general_coordinator", "General coordinator"
    LOCAL_COORDINATOR = "local_coordinator", "Local coordinator"
    SUPERVISOR = "supervisor", "Supervisor"
    PHYSICIAN = "physician", "Physician"
    NURSE = "nurse", "Nurse"
    NURSING_TECHNICIAN = "nursing_technician", "Nursing technician"
    PHARMACIST = "pharmacist", "Pharmacist"
    PHYSIOTHERAPIST = "physiotherapist", "Physiotherapist"
    PSYCHOLOGIST = "psychologist", "Psychologist"
    SOCIAL_WORKER = "social_worker", "Social worker"
    NUTRITIONIST = "nutritionist", "Nutritionist"
    SPEECH_THERAPIST = "speech_therapist", "Speech therapist"
    RECEPTIONIST = "receptionist", "Receptionist"
    SECRETARY = "secretary", "Secretary"
    CLEANING_STAFF = "cleaning_staff", "Cleaning staff"
    SECURITY_GUARD = "security_guard", "Security guard"


class PermissionToken(models.TextChoices):
    VIEW_DASHBOARD = "view_dashboard", "View dashboard"
    MANAGE_PATIENTS = "manage_patients", "Manage patients"
    MANAGE_ATTENDANCES = "manage_attendances", "Manage attendances"
    MANAGE_PRESCRIPTIONS = "manage_prescriptions", "Manage prescriptions"
    MANAGE_EXAMS = "manage_exams", "Manage exams"
    MANAGE_VITAL_SIGNS = "manage_vital_signs", "Manage vital signs"
    MANAGE_MEDICATIONS = "manage_medications", "Manage medications"
    MANAGE_STOCK = "manage_stock", "Manage stock"
    MANAGE_USERS = "manage_users", "Manage users"
    MANAGE_ESTABLISHMENTS = "manage_establishments", "Manage establishments"
    VIEW_REPORTS = "view_reports", "View reports"
    MANAGE_REPORTS = "manage_reports", "Manage reports"
    ADMIN_SYSTEM = "admin_system", "Administer system"
    # Scoping capability: without it a user is confined to their own establishment.
    VIEW_ALL_ESTABLISHMENTS = "view_all_establishments", "View all establishments"


ALL_TOKENS: frozenset[str] = frozenset(PermissionToken.values)


class RoleMap:
    """
    Immutable profile -> frozenset(permission token) table.

    Validated on construction: every profile must map to a non-empty subset
    of the known tokens. Lookups for unknown profiles return an empty set.
    """

    __slots__ = ("_table",)

    def __init__(self, mapping: Mapping[str, Iterable[str]], *, known_tokens: Iterable[str] = ALL_TOKENS):
        known = frozenset(str(t) for t in known_tokens)
        table: dict[str, frozenset[str]] = {}

        for profile, tokens in mapping.items():
            key = str(profile)
            values = frozenset(str(t) for t in tokens)
            if not values:
                raise ImproperlyConfigured(f"Profile '{key}' has no permissions.")
            unknown = values - known
            if unknown:
                raise ImproperlyConfigured(
                    f"Profile '{key}' references unknown permissions: {', '.join(sorted(unknown))}"
                )
            table[key] = values

        if not table:
            raise ImproperlyConfigured("Role map is empty.")

        object.__setattr__(self, "_table", MappingProxyType(table))

    def __setattr__(self, name, value):
        raise AttributeError("RoleMap is immutable")

    def __getitem__(self, profile: str) -> frozenset[str]:
        return self._table[str(profile)]

    def __contains__(self, profile: object) -> bool:
        return str(profile) in self._table

    def __iter__(self):
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"RoleMap({len(self._table)} profiles)"

    def as_mapping(self) -> Mapping[str, frozenset[str]]:
        return self._table

    def profiles(self) -> frozenset[str]:
        return frozenset(self._table)

    def permissions_for(self, profile: str | None) -> frozenset[str]:
        if not profile:
            return frozenset()
        return self._table.get(str(profile), frozenset())

    def grants(self, profile: str | None, token: str) -> bool:
        return str(token) in self.permissions_for(profile)


P = PermissionToken

# Clinical base shared by most care profiles
_CLINICAL = (
    P.VIEW_DASHBOARD,
    P.MANAGE_PATIENTS,
    P.MANAGE_ATTENDANCES,
    P.MANAGE_PRESCRIPTIONS,
    P.MANAGE_EXAMS,
    P.MANAGE_VITAL_SIGNS,
)

_MANAGEMENT = (
    *_CLINICAL,
    P.MANAGE_MEDICATIONS,
    P.MANAGE_STOCK,
    P.MANAGE_USERS,
    P.VIEW_REPORTS,
)

DEFAULT_PROFILE_PERMISSIONS: dict[str, tuple[str, ...]] = {
    Profile.SYSTEM_MASTER: (
        *_MANAGEMENT,
        P.MANAGE_ESTABLISHMENTS,
        P.MANAGE_REPORTS,
        P.ADMIN_SYSTEM,
        P.VIEW_ALL_ESTABLISHMENTS,
    ),
    Profile.TOTAL_MANAGER: (
        *_MANAGEMENT,
        P.MANAGE_ESTABLISHMENTS,
        P.MANAGE_REPORTS,
        P.VIEW_ALL_ESTABLISHMENTS,
    ),
    Profile.GENERAL_MANAGER: (*_MANAGEMENT, P.MANAGE_REPORTS, P.VIEW_ALL_ESTABLISHMENTS),
    Profile.LOCAL_MANAGER: _MANAGEMENT,
    Profile.GENERAL_DIRECTOR: (P.VIEW_DASHBOARD, P.VIEW_REPORTS, P.MANAGE_REPORTS, P.VIEW_ALL_ESTABLISHMENTS),
    Profile.LOCAL_DIRECTOR: (P.VIEW_DASHBOARD, P.VIEW_REPORTS),
    Profile.GENERAL_COORDINATOR: (
        P.VIEW_DASHBOARD,
        P.MANAGE_ATTENDANCES,
        P.MANAGE_PRESCRIPTIONS,
        P.MANAGE_EXAMS,
        P.MANAGE_VITAL_SIGNS,
        P.VIEW_REPORTS,
        P.VIEW_ALL_ESTABLISHMENTS,
    ),
    Profile.LOCAL_COORDINATOR: (
        P.VIEW_DASHBOARD,
        P.MANAGE_ATTENDANCES,
        P.MANAGE_PRESCRIPTIONS,
        P.MANAGE_EXAMS,
        P.MANAGE_VITAL_SIGNS,
        P.VIEW_REPORTS,
    ),
    Profile.SUPERVISOR: (P.VIEW_DASHBOARD, P.MANAGE_ATTENDANCES, P.VIEW_REPORTS),
    Profile.PHYSICIAN: (*_CLINICAL, P.VIEW_REPORTS),
    Profile.NURSE: (*_CLINICAL, P.MANAGE_MEDICATIONS, P.VIEW_REPORTS),
    Profile.NURSING_TECHNICIAN: (P.VIEW_DASHBOARD, P.MANAGE_VITAL_SIGNS, P.MANAGE_MEDICATIONS),
    Profile.PHARMACIST: (P.VIEW_DASHBOARD, P.MANAGE_MEDICATIONS, P.MANAGE_STOCK, P.VIEW_REPORTS),
    Profile.PHYSIOTHERAPIST: (P.VIEW_DASHBOARD, P.MANAGE_PATIENTS, P.MANAGE_ATTENDANCES, P.VIEW_REPORTS),
    Profile.PSYCHOLOGIST: (P.VIEW_DASHBOARD, P.MANAGE_PATIENTS, P.MANAGE_ATTENDANCES, P.VIEW_REPORTS),
    Profile.SOCIAL_WORKER: (P.VIEW_DASHBOARD, P.MANAGE_PATIENTS, P.VIEW_REPORTS),
    Profile.NUTRITIONIST: (P.VIEW_DASHBOARD, P.MANAGE_PATIENTS, P.VIEW_REPORTS),
    Profile.SPEECH_THERAPIST: (P.VIEW_DASHBOARD, P.MANAGE_PATIENTS, P.VIEW_REPORTS),
    Profile.RECEPTIONIST: (P.VIEW_DASHBOARD, P.MANAGE_ATTENDANCES),
    Profile.SECRETARY: (P.VIEW_DASHBOARD, P.MANAGE_ATTENDANCES),
    Profile.CLEANING_STAFF: (P.VIEW_DASHBOARD,),
    Profile.SECURITY_GUARD: (P.VIEW_DASHBOARD,),
}

DEFAULT_ROLE_MAP = RoleMap(DEFAULT_PROFILE_PERMISSIONS)
