# a1_core/tests/helpers.py

DEFAULT_PASSWORD = "Pass@12345"


def error_of(response):
    """The `error` object of the canonical envelope."""
    body = response.json()
    assert "error" in body, body
    return body["error"]


def establishment_header(establishment):
    """Scope header for the DRF test client (HTTP_ prefix)."""
    return {"HTTP_X_ESTABLISHMENT_ID": str(establishment.id)}
