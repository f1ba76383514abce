"""
End-to-end checks through real tokens: the same rules hold on every scoped
endpoint, whatever the resource.
"""
import pytest
from rest_framework.test import APIClient

from a1_core.iam.profiles import Profile
from a1_core.patients.api.views import PatientViewSet
from a1_core.patients.models import Patient
from a1_core.tests.helpers import error_of

SCOPED_LISTS = [
    "/api/v1/establishments/",
    "/api/v1/users/",
    "/api/v1/patients/",
    "/api/v1/attendances/",
    "/api/v1/audit/events/",
]


@pytest.mark.django_db
@pytest.mark.parametrize("url", SCOPED_LISTS)
def test_anonymous_is_401_everywhere(url):
    res = APIClient().get(url)
    assert res.status_code == 401
    assert error_of(res)["code"] == "not_authenticated"


@pytest.mark.django_db
@pytest.mark.parametrize("url", ["/api/v1/establishments/", "/api/v1/patients/"])
def test_legacy_prefix_behaves_the_same(url, jwt_client_for, local_manager):
    legacy = url.replace("/api/v1/", "/api/")
    client = jwt_client_for(local_manager)
    assert client.get(url).json()["count"] == client.get(legacy).json()["count"]


@pytest.mark.django_db
def test_director_cannot_read_other_establishment(jwt_client_for, make_user, establishment, other_establishment):
    director = make_user(Profile.LOCAL_DIRECTOR, establishment=establishment)
    res = jwt_client_for(director).get(f"/api/v1/establishments/{other_establishment.id}/")

    assert res.status_code == 403
    assert error_of(res)["message"] == "You may only access resources of your own establishment."


@pytest.mark.django_db
def test_general_manager_without_home_passes(jwt_client_for, make_user, other_establishment, patient, make_attendance):
    gm = make_user(Profile.GENERAL_MANAGER)
    att = make_attendance(patient, other_establishment)
    client = jwt_client_for(gm)

    assert client.get(f"/api/v1/attendances/{att.id}/").status_code == 200
    assert client.get(f"/api/v1/establishments/{other_establishment.id}/").status_code == 200
    assert client.get("/api/v1/audit/events/", {"establishment_id": str(other_establishment.id)}).status_code == 200


@pytest.mark.django_db
def test_restricted_profile_without_home_is_403(jwt_client_for, make_user):
    nurse = make_user(Profile.NURSE)
    res = jwt_client_for(nurse).get("/api/v1/patients/")

    assert res.status_code == 403
    assert error_of(res)["code"] == "establishment_not_assigned"


@pytest.mark.django_db
def test_conflicting_establishment_is_rejected_not_overridden(jwt_client_for, local_manager, other_establishment, patient):
    res = jwt_client_for(local_manager).get(
        "/api/v1/attendances/",
        {"establishment_id": str(other_establishment.id)},
    )
    assert res.status_code == 403
    assert error_of(res)["code"] == "establishment_context_denied"


@pytest.mark.django_db
def test_missing_resource_is_404_before_ownership(jwt_client_for, make_user, establishment):
    director = make_user(Profile.LOCAL_DIRECTOR, establishment=establishment)
    res = jwt_client_for(director).get("/api/v1/establishments/does-not-exist/")
    assert res.status_code == 404


@pytest.mark.django_db
def test_list_and_detail_agree_for_patients(jwt_client_for, local_manager, establishment, other_establishment, make_attendance):
    here = Patient.objects.create(full_name="Here")
    there = Patient.objects.create(full_name="There")
    nowhere = Patient.objects.create(full_name="Nowhere")
    make_attendance(here, establishment)
    make_attendance(there, other_establishment)

    client = jwt_client_for(local_manager)
    listed = {row["id"] for row in client.get("/api/v1/patients/").json()["results"]}

    for p in (here, there, nowhere):
        detail_ok = client.get(f"/api/v1/patients/{p.id}/").status_code == 200
        assert (str(p.id) in listed) is detail_ok


class _BrokenResolver:
    def find_owner(self, resource_type, resource_id):
        raise RuntimeError("replica lag on db-7")

    def scope_queryset(self, resource_type, scope, queryset=None):
        raise RuntimeError("replica lag on db-7")


@pytest.mark.django_db
def test_resolver_failure_is_generic_500(jwt_client_for, local_manager, patient, monkeypatch):
    monkeypatch.setattr(PatientViewSet, "ownership_resolver", _BrokenResolver())

    res = jwt_client_for(local_manager).get(f"/api/v1/patients/{patient.id}/")
    assert res.status_code == 500
    err = error_of(res)
    assert err["message"] == "Unexpected server error."
    assert "db-7" not in res.content.decode()
