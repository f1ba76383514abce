import uuid

import pytest

from a1_core.iam.exceptions import (
    EstablishmentContextDenied,
    EstablishmentNotAssigned,
    InsufficientPermission,
    ProfileNotAuthorized,
    ResourceAccessDenied,
    Unauthenticated,
)
from a1_core.iam.ownership import ResourceOwner
from a1_core.iam.policy import AccessPolicy, Principal, all_of, any_of, default_access_policy
from a1_core.iam.profiles import ALL_TOKENS, DEFAULT_ROLE_MAP, PermissionToken as P, Profile, RoleMap

HOME = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER = uuid.UUID("22222222-2222-2222-2222-222222222222")


def principal(profile, establishment_id=HOME):
    return Principal(user_id=1, profile_id=uuid.uuid4(), profile=str(profile), establishment_id=establishment_id)


@pytest.fixture
def policy():
    return AccessPolicy(DEFAULT_ROLE_MAP)


@pytest.mark.parametrize("profile", Profile.values)
@pytest.mark.parametrize("token", sorted(ALL_TOKENS))
def test_has_permission_iff_token_in_role_map(policy, profile, token):
    expected = token in DEFAULT_ROLE_MAP[profile]
    assert policy.has_permission(principal(profile), token) is expected


def test_check_requires_principal(policy):
    with pytest.raises(Unauthenticated):
        policy.check(None, P.VIEW_DASHBOARD)


def test_check_any_of(policy):
    # receptionist manages attendances but not patients
    receptionist = principal(Profile.RECEPTIONIST)
    policy.check(receptionist, any_of(P.MANAGE_PATIENTS, P.MANAGE_ATTENDANCES))

    with pytest.raises(InsufficientPermission):
        policy.check(receptionist, any_of(P.MANAGE_PATIENTS, P.MANAGE_USERS))


def test_check_all_of(policy):
    physician = principal(Profile.PHYSICIAN)
    policy.check(physician, all_of(P.MANAGE_PATIENTS, P.MANAGE_EXAMS))

    with pytest.raises(InsufficientPermission) as exc:
        policy.check(physician, all_of(P.MANAGE_PATIENTS, P.MANAGE_USERS))

    # The missing token is never echoed back
    assert "manage_users" not in str(exc.value.detail)
    assert str(exc.value.detail) == "Insufficient permission to access this resource."


def test_bare_token_and_iterables_mean_all_of(policy):
    nurse = principal(Profile.NURSE)
    policy.check(nurse, P.MANAGE_MEDICATIONS)
    policy.check(nurse, [P.MANAGE_MEDICATIONS, P.MANAGE_VITAL_SIGNS])
    with pytest.raises(InsufficientPermission):
        policy.check(nurse, [P.MANAGE_MEDICATIONS, P.MANAGE_STOCK])


def test_empty_requirement_is_rejected():
    with pytest.raises(ValueError):
        any_of()


def test_check_profile(policy):
    policy.check_profile(principal(Profile.SUPERVISOR), [Profile.SUPERVISOR, Profile.LOCAL_MANAGER])
    with pytest.raises(ProfileNotAuthorized):
        policy.check_profile(principal(Profile.NURSE), [Profile.SUPERVISOR])
    with pytest.raises(Unauthenticated):
        policy.check_profile(None, [Profile.SUPERVISOR])


def test_injected_role_map_replaces_the_default():
    custom = AccessPolicy(RoleMap({"physician": [P.VIEW_DASHBOARD]}))
    physician = principal(Profile.PHYSICIAN)

    assert custom.permissions_for(physician) == frozenset({"view_dashboard"})
    with pytest.raises(InsufficientPermission):
        custom.check(physician, P.MANAGE_PATIENTS)


# -----------------------------
# Establishment scope
# -----------------------------

def test_scope_for_restricted_is_pinned_to_home(policy):
    scope = policy.scope_for(principal(Profile.PHYSICIAN))
    assert scope.unrestricted is False
    assert scope.establishment_id == HOME


def test_scope_for_unrestricted_has_no_filter(policy):
    scope = policy.scope_for(principal(Profile.GENERAL_MANAGER, establishment_id=None))
    assert scope.unrestricted is True
    assert scope.establishment_id is None
    assert not scope.is_filtered


def test_scope_for_restricted_without_home_is_denied(policy):
    with pytest.raises(EstablishmentNotAssigned):
        policy.scope_for(principal(Profile.NURSE, establishment_id=None))


def test_scope_for_requires_principal(policy):
    with pytest.raises(Unauthenticated):
        policy.scope_for(None)


RESTRICTED = [p for p in Profile.values if not DEFAULT_ROLE_MAP.grants(p, P.VIEW_ALL_ESTABLISHMENTS)]
UNRESTRICTED = [p for p in Profile.values if DEFAULT_ROLE_MAP.grants(p, P.VIEW_ALL_ESTABLISHMENTS)]


def test_every_profile_is_classified():
    assert RESTRICTED and UNRESTRICTED
    assert set(RESTRICTED) | set(UNRESTRICTED) == set(Profile.values)


@pytest.mark.parametrize("profile", RESTRICTED)
def test_restricted_request_without_establishment_is_auto_filled(policy, profile):
    scope = policy.resolve_request_scope(principal(profile), None)
    assert scope.unrestricted is False
    assert scope.establishment_id == HOME


@pytest.mark.parametrize("profile", RESTRICTED)
def test_restricted_request_for_home_passes(policy, profile):
    scope = policy.resolve_request_scope(principal(profile), HOME)
    assert scope.establishment_id == HOME


@pytest.mark.parametrize("profile", RESTRICTED)
def test_restricted_request_for_other_establishment_is_denied(policy, profile):
    with pytest.raises(EstablishmentContextDenied) as exc:
        policy.resolve_request_scope(principal(profile), OTHER)
    assert "your own establishment" in str(exc.value.detail)


@pytest.mark.parametrize("profile", UNRESTRICTED)
@pytest.mark.parametrize("home", [None, HOME])
def test_unrestricted_request_narrows_to_requested(policy, profile, home):
    p = principal(profile, establishment_id=home)

    everything = policy.resolve_request_scope(p, None)
    assert everything.unrestricted is True
    assert everything.establishment_id is None

    narrowed = policy.resolve_request_scope(p, OTHER)
    assert narrowed.unrestricted is True
    assert narrowed.establishment_id == OTHER


def owner(*establishment_ids, allow_unowned=False):
    return ResourceOwner(
        resource_type="attendance",
        resource_id=uuid.uuid4(),
        establishment_ids=frozenset(establishment_ids),
        allow_unowned=allow_unowned,
    )


def test_ensure_in_scope(policy):
    director = principal(Profile.LOCAL_DIRECTOR)

    policy.ensure_in_scope(director, owner(HOME))
    policy.ensure_in_scope(director, owner(OTHER, HOME))
    policy.ensure_in_scope(director, owner(allow_unowned=True))

    with pytest.raises(ResourceAccessDenied) as exc:
        policy.ensure_in_scope(director, owner(OTHER))
    assert str(exc.value.detail) == "You may only access resources of your own establishment."

    with pytest.raises(ResourceAccessDenied):
        policy.ensure_in_scope(director, owner())


def test_ensure_in_scope_unrestricted_passes_everything(policy):
    gm = principal(Profile.GENERAL_MANAGER, establishment_id=None)
    policy.ensure_in_scope(gm, owner(OTHER))
    policy.ensure_in_scope(gm, owner())


def test_ensure_in_scope_restricted_without_home(policy):
    with pytest.raises(ResourceAccessDenied):
        policy.ensure_in_scope(principal(Profile.NURSE, establishment_id=None), owner(HOME))


# -----------------------------
# Process-wide default
# -----------------------------

CUSTOM_ROLE_MAP = {"physician": ["view_dashboard"]}


def test_default_policy_follows_settings(settings):
    assert default_access_policy().role_map is DEFAULT_ROLE_MAP

    settings.IAM_ROLE_MAP = f"{__name__}.CUSTOM_ROLE_MAP"
    try:
        policy = default_access_policy()
        assert policy.role_map.permissions_for("physician") == frozenset({"view_dashboard"})
        assert policy.role_map.permissions_for("nurse") == frozenset()
    finally:
        settings.IAM_ROLE_MAP = "a1_core.iam.profiles.DEFAULT_ROLE_MAP"

    assert default_access_policy().role_map is DEFAULT_ROLE_MAP
