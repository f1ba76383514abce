import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from a1_core.audit.models import AuditEvent
from a1_core.iam.models import UserProfile
from a1_core.iam.profiles import Profile
from a1_core.tests.helpers import error_of

URL = "/api/v1/users/"


def detail(user):
    return f"{URL}{user.a1_profile.id}/"


@pytest.fixture
def nurse(make_user, establishment):
    return make_user(Profile.NURSE, establishment=establishment, username="nurse-e1")


@pytest.fixture
def foreign_nurse(make_user, other_establishment):
    return make_user(Profile.NURSE, establishment=other_establishment, username="nurse-e2")


@pytest.mark.django_db
def test_list_is_scoped_for_local_manager(client_for, local_manager, nurse, foreign_nurse, system_master):
    res = client_for(local_manager).get(URL)
    assert res.status_code == 200

    usernames = {row["username"] for row in res.json()["results"]}
    assert usernames == {"local-manager", "nurse-e1"}


@pytest.mark.django_db
def test_list_is_complete_for_system_master(client_for, local_manager, nurse, foreign_nurse, system_master):
    res = client_for(system_master).get(URL)
    assert res.json()["count"] == 4


@pytest.mark.django_db
def test_list_can_be_narrowed_by_establishment(client_for, system_master, nurse, foreign_nurse, other_establishment):
    res = client_for(system_master).get(URL, {"establishment_id": str(other_establishment.id)})
    assert [row["username"] for row in res.json()["results"]] == ["nurse-e2"]


@pytest.mark.django_db
def test_list_filters_by_profile(client_for, system_master, local_manager, nurse):
    res = client_for(system_master).get(URL, {"profile": "nurse"})
    assert [row["username"] for row in res.json()["results"]] == ["nurse-e1"]


@pytest.mark.django_db
def test_token_required(client_for, nurse):
    res = client_for(nurse).get(URL)
    assert res.status_code == 403
    assert error_of(res)["code"] == "permission_denied"


@pytest.mark.django_db
def test_retrieve_foreign_user_is_403(client_for, local_manager, foreign_nurse):
    res = client_for(local_manager).get(detail(foreign_nurse))
    assert res.status_code == 403
    assert error_of(res)["code"] == "resource_access_denied"


@pytest.mark.django_db
def test_system_wide_users_are_hidden_from_restricted_managers(client_for, local_manager, system_master):
    assert client_for(local_manager).get(detail(system_master)).status_code == 403


@pytest.mark.django_db
def test_retrieve_unknown_user_is_404(client_for, local_manager):
    res = client_for(local_manager).get(f"{URL}6f1c1f36-9d8e-4a44-9a55-2d0f6f6d7c11/")
    assert res.status_code == 404
    assert error_of(res)["code"] == "not_found"


@pytest.mark.django_db
def test_create_defaults_to_home_establishment(client_for, local_manager, establishment):
    res = client_for(local_manager).post(
        URL,
        {"username": "new-nurse", "password": "Secret@123", "profile": "nurse", "full_name": "Ana Lima"},
        format="json",
    )
    assert res.status_code == 201, res.content
    body = res.json()
    assert body["establishment_id"] == str(establishment.id)
    assert body["profile"] == "nurse"

    assert AuditEvent.objects.filter(event_code="user.created", entity_id=body["id"]).exists()


@pytest.mark.django_db
def test_create_in_other_establishment_is_403(client_for, local_manager, other_establishment):
    res = client_for(local_manager).post(
        URL,
        {
            "username": "intruder",
            "password": "Secret@123",
            "profile": "nurse",
            "establishment_id": str(other_establishment.id),
        },
        format="json",
    )
    assert res.status_code == 403
    assert error_of(res)["code"] == "establishment_context_denied"
    assert not get_user_model().objects.filter(username="intruder").exists()


@pytest.mark.django_db
def test_restricted_manager_cannot_grant_system_wide_profile(client_for, local_manager):
    res = client_for(local_manager).post(
        URL,
        {"username": "boss", "password": "Secret@123", "profile": "general_manager"},
        format="json",
    )
    assert res.status_code == 403


@pytest.mark.django_db
def test_system_wide_profile_needs_no_establishment(client_for, system_master):
    res = client_for(system_master).post(
        URL,
        {"username": "gm", "password": "Secret@123", "profile": "general_manager"},
        format="json",
    )
    assert res.status_code == 201
    assert res.json()["establishment_id"] is None


@pytest.mark.django_db
def test_restricted_profile_needs_establishment(client_for, system_master):
    res = client_for(system_master).post(
        URL,
        {"username": "lost-nurse", "password": "Secret@123", "profile": "nurse"},
        format="json",
    )
    assert res.status_code == 400
    assert "establishment_id" in error_of(res)["details"]


@pytest.mark.django_db
def test_duplicate_username_is_400(client_for, local_manager, nurse):
    res = client_for(local_manager).post(
        URL,
        {"username": "nurse-e1", "password": "Secret@123", "profile": "nurse"},
        format="json",
    )
    assert res.status_code == 400
    assert error_of(res)["code"] == "validation_error"


@pytest.mark.django_db
def test_partial_update_changes_profile(client_for, local_manager, nurse):
    res = client_for(local_manager).patch(detail(nurse), {"profile": "physician"}, format="json")
    assert res.status_code == 200
    assert UserProfile.objects.get(user=nurse).profile == "physician"


@pytest.mark.django_db
def test_deactivate_user(client_for, local_manager, nurse):
    res = client_for(local_manager).post(f"{detail(nurse)}deactivate/")
    assert res.status_code == 200
    assert res.json()["is_active"] is False

    nurse.refresh_from_db()
    assert nurse.is_active is False
    assert AuditEvent.objects.filter(event_code="user.deactivated").count() == 1


@pytest.mark.django_db
def test_cannot_deactivate_self(client_for, local_manager):
    res = client_for(local_manager).post(f"{detail(local_manager)}deactivate/")
    assert res.status_code == 400


@pytest.mark.django_db
def test_reset_password(client_for, local_manager, nurse):
    res = client_for(local_manager).post(
        f"{detail(nurse)}reset-password/", {"password": "Brand@New1"}, format="json"
    )
    assert res.status_code == 204

    login = APIClient().post(
        "/api/v1/auth/login/", {"username": "nurse-e1", "password": "Brand@New1"}, format="json"
    )
    assert login.status_code == 200


@pytest.fixture
def homed_general_manager(make_user, establishment):
    # system-wide profile that still carries a home establishment
    return make_user(Profile.GENERAL_MANAGER, establishment=establishment, username="gm-e1")


@pytest.mark.django_db
def test_restricted_manager_cannot_edit_system_wide_account(client_for, local_manager, homed_general_manager):
    res = client_for(local_manager).patch(
        detail(homed_general_manager), {"full_name": "Taken Over", "email": "x@example.com"}, format="json"
    )
    assert res.status_code == 403
    assert error_of(res)["code"] == "permission_denied"

    up = UserProfile.objects.select_related("user").get(user=homed_general_manager)
    assert up.full_name != "Taken Over"
    assert up.user.email != "x@example.com"
    assert not AuditEvent.objects.filter(event_code="user.updated").exists()


@pytest.mark.django_db
def test_restricted_manager_cannot_deactivate_system_wide_account(client_for, local_manager, homed_general_manager):
    res = client_for(local_manager).post(f"{detail(homed_general_manager)}deactivate/")
    assert res.status_code == 403

    homed_general_manager.refresh_from_db()
    assert homed_general_manager.is_active is True


@pytest.mark.django_db
def test_restricted_manager_cannot_reset_system_wide_password(client_for, local_manager, homed_general_manager):
    res = client_for(local_manager).post(
        f"{detail(homed_general_manager)}reset-password/", {"password": "Brand@New1"}, format="json"
    )
    assert res.status_code == 403

    login = APIClient().post("/api/v1/auth/login/", {"username": "gm-e1", "password": "Brand@New1"}, format="json")
    assert login.status_code == 401
    assert not AuditEvent.objects.filter(event_code="user.password_reset").exists()


@pytest.mark.django_db
def test_system_master_manages_system_wide_account(client_for, system_master, homed_general_manager):
    res = client_for(system_master).patch(detail(homed_general_manager), {"full_name": "Gina Souza"}, format="json")
    assert res.status_code == 200
    assert res.json()["full_name"] == "Gina Souza"
