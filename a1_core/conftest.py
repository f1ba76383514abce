# a1_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from a1_core.attendances.models import Attendance
from a1_core.establishments.models import Establishment, EstablishmentType
from a1_core.iam.models import UserProfile
from a1_core.iam.profiles import Profile
from a1_core.patients.models import Patient
from a1_core.tests.helpers import DEFAULT_PASSWORD



@pytest.fixture
def establishment(db):
    return Establishment.objects.create(name="UBS Centro", code="ubs-centro", establishment_type=EstablishmentType.UBS)


@pytest.fixture
def other_establishment(db):
    return Establishment.objects.create(name="UPA Norte", code="upa-norte", establishment_type=EstablishmentType.UPA)


@pytest.fixture
def make_user(db):
    """
    make_user(profile, establishment=None, username=None) -> User with an active A1 profile.
    """
    User = get_user_model()
    counter = {"n": 0}

    def _make(profile, establishment=None, username=None, password=DEFAULT_PASSWORD, **profile_fields):
        counter["n"] += 1
        user = User.objects.create_user(
            username=username or f"{profile}-{counter['n']}",
            password=password,
            is_active=True,
        )
        UserProfile.objects.create(
            user=user,
            profile=profile,
            establishment=establishment,
            **profile_fields,
        )
        return user

    return _make


@pytest.fixture
def client_for():
    """APIClient authenticated as the given user (bypasses token parsing)."""

    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c

    return _client


@pytest.fixture
def jwt_client_for():
    """
    APIClient carrying a real Bearer token, so ProfileJWTAuthentication runs.
    """

    def _client(user):
        c = APIClient()
        access = str(RefreshToken.for_user(user).access_token)
        c.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        return c

    return _client


@pytest.fixture
def system_master(make_user):
    return make_user(Profile.SYSTEM_MASTER, username="master")


@pytest.fixture
def local_manager(make_user, establishment):
    return make_user(Profile.LOCAL_MANAGER, establishment=establishment, username="local-manager")


@pytest.fixture
def patient(db):
    return Patient.objects.create(full_name="Maria da Silva", document="12345678901")


@pytest.fixture
def make_attendance(db):
    def _make(patient, establishment, **fields):
        return Attendance.objects.create(patient=patient, establishment=establishment, **fields)

    return _make
