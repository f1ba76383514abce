import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from a1_core.attendances.models import Attendance, AttendanceStatus
from a1_core.audit.models import AuditEvent
from a1_core.iam.profiles import Profile
from a1_core.tests.helpers import error_of, establishment_header

pytestmark = pytest.mark.django_db

URL = "/api/v1/attendances/"


@pytest.fixture
def receptionist(make_user, establishment):
    return make_user(Profile.RECEPTIONIST, establishment=establishment)


def test_create_fills_home_establishment(client_for, receptionist, establishment, patient):
    res = client_for(receptionist).post(URL, {"patient_id": str(patient.id), "reason": "fever"}, format="json")
    assert res.status_code == 201, res.content

    body = res.json()
    assert body["establishment_id"] == str(establishment.id)
    assert body["status"] == "waiting"
    assert body["patient_name"] == "Maria da Silva"

    event = AuditEvent.objects.get(event_code="attendance.created")
    assert event.establishment_id == establishment.id
    assert event.actor_user_id == receptionist.id


def test_create_with_own_establishment_is_accepted(client_for, receptionist, establishment, patient):
    res = client_for(receptionist).post(
        URL,
        {"patient_id": str(patient.id), "establishment_id": str(establishment.id)},
        format="json",
    )
    assert res.status_code == 201


def test_create_in_other_establishment_is_403(client_for, receptionist, other_establishment, patient):
    res = client_for(receptionist).post(
        URL,
        {"patient_id": str(patient.id), "establishment_id": str(other_establishment.id)},
        format="json",
    )
    assert res.status_code == 403
    assert error_of(res)["code"] == "establishment_context_denied"
    assert not Attendance.objects.exists()


def test_unrestricted_create_needs_a_target(client_for, system_master, patient):
    res = client_for(system_master).post(URL, {"patient_id": str(patient.id)}, format="json")
    assert res.status_code == 400
    assert "establishment_id" in error_of(res)["details"]


def test_unrestricted_create_via_header(client_for, system_master, other_establishment, patient):
    res = client_for(system_master).post(
        URL,
        {"patient_id": str(patient.id)},
        format="json",
        **establishment_header(other_establishment),
    )
    assert res.status_code == 201
    assert res.json()["establishment_id"] == str(other_establishment.id)


def test_malformed_establishment_id_is_400(client_for, system_master, patient):
    res = client_for(system_master).post(
        URL,
        {"patient_id": str(patient.id), "establishment_id": "not-a-uuid"},
        format="json",
    )
    assert res.status_code == 400
    assert error_of(res)["code"] == "validation_error"


def test_unknown_patient_is_400(client_for, receptionist):
    res = client_for(receptionist).post(URL, {"patient_id": str(uuid.uuid4())}, format="json")
    assert res.status_code == 400
    assert "patient_id" in error_of(res)["details"]


def test_create_for_patient_owned_elsewhere_is_403(client_for, receptionist, other_establishment, patient, make_attendance):
    make_attendance(patient, other_establishment)

    res = client_for(receptionist).post(URL, {"patient_id": str(patient.id)}, format="json")
    assert res.status_code == 403
    assert error_of(res)["code"] == "resource_access_denied"

    # ownership did not move
    assert list(Attendance.objects.values_list("establishment_id", flat=True)) == [other_establishment.id]
    assert not AuditEvent.objects.filter(event_code="attendance.created").exists()


def test_create_for_patient_already_seen_here(client_for, receptionist, establishment, patient, make_attendance):
    make_attendance(patient, establishment, status=AttendanceStatus.FINISHED)

    res = client_for(receptionist).post(URL, {"patient_id": str(patient.id)}, format="json")
    assert res.status_code == 201


def test_unrestricted_create_for_any_patient(client_for, system_master, establishment, other_establishment, patient, make_attendance):
    make_attendance(patient, other_establishment)

    res = client_for(system_master).post(
        URL,
        {"patient_id": str(patient.id)},
        format="json",
        **establishment_header(establishment),
    )
    assert res.status_code == 201
    assert res.json()["establishment_id"] == str(establishment.id)


def test_future_start_is_400(client_for, receptionist, patient):
    started_at = (timezone.now() + timedelta(hours=2)).isoformat()
    res = client_for(receptionist).post(URL, {"patient_id": str(patient.id), "started_at": started_at}, format="json")
    assert res.status_code == 400
    assert "started_at" in error_of(res)["details"]
    assert not Attendance.objects.exists()


def test_past_start_is_kept(client_for, receptionist, patient):
    started_at = timezone.now() - timedelta(hours=1)
    res = client_for(receptionist).post(
        URL, {"patient_id": str(patient.id), "started_at": started_at.isoformat()}, format="json"
    )
    assert res.status_code == 201
    assert abs(Attendance.objects.get().started_at - started_at) < timedelta(seconds=1)


def test_list_is_scoped_and_filterable(client_for, receptionist, establishment, other_establishment, patient, make_attendance):
    make_attendance(patient, establishment)
    make_attendance(patient, establishment, status=AttendanceStatus.FINISHED)
    make_attendance(patient, other_establishment)

    client = client_for(receptionist)
    assert client.get(URL).json()["count"] == 2
    assert client.get(URL, {"status": "finished"}).json()["count"] == 1


def test_retrieve_foreign_attendance_is_403(client_for, receptionist, other_establishment, patient, make_attendance):
    att = make_attendance(patient, other_establishment)
    res = client_for(receptionist).get(f"{URL}{att.id}/")
    assert res.status_code == 403
    assert error_of(res)["code"] == "resource_access_denied"


def test_finish_then_reopen_is_rejected(client_for, receptionist, establishment, patient, make_attendance):
    att = make_attendance(patient, establishment)
    client = client_for(receptionist)

    res = client.patch(f"{URL}{att.id}/", {"status": "finished"}, format="json")
    assert res.status_code == 200
    assert res.json()["finished_at"] is not None

    res = client.patch(f"{URL}{att.id}/", {"status": "in_progress"}, format="json")
    assert res.status_code == 400


def test_profile_without_attendance_token_is_403(client_for, make_user, establishment):
    pharmacist = make_user(Profile.PHARMACIST, establishment=establishment)
    assert client_for(pharmacist).get(URL).status_code == 403
