import pytest
from rest_framework.permissions import AllowAny
from rest_framework.test import APIClient, APIRequestFactory
from rest_framework.views import APIView

from a1_core.tests.helpers import error_of


class ExplodingView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        raise KeyError("secret-internal-detail")


def test_unhandled_error_becomes_generic_500(caplog):
    request = APIRequestFactory().get("/boom/")
    res = ExplodingView.as_view()(request)

    assert res.status_code == 500
    err = res.data["error"]
    assert err["code"] == "server_error"
    assert err["message"] == "Unexpected server error."
    assert err["details"] is None
    assert "secret-internal-detail" not in str(res.data)
    assert err["request_id"] in caplog.text


@pytest.mark.django_db
def test_inbound_request_id_is_echoed():
    res = APIClient().get("/api/v1/me/", HTTP_X_REQUEST_ID="req-12345678")

    assert res["X-Request-Id"] == "req-12345678"
    assert error_of(res)["request_id"] == "req-12345678"


@pytest.mark.django_db
def test_malformed_request_id_is_replaced():
    res = APIClient().get("/api/v1/me/", HTTP_X_REQUEST_ID="bad id!")

    rid = res["X-Request-Id"]
    assert rid != "bad id!"
    assert error_of(res)["request_id"] == rid


@pytest.mark.django_db
def test_validation_errors_carry_field_details(client_for, system_master):
    res = client_for(system_master).post("/api/v1/patients/", {}, format="json")

    assert res.status_code == 400
    err = error_of(res)
    assert err["code"] == "validation_error"
    assert err["message"] == "Request failed."
    assert "full_name" in err["details"]
