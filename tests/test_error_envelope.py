import uuid

from fastapi.testclient import TestClient

from src.main import app


def test_error_responses_include_request_id_in_body_and_header():
    client = TestClient(app)

    r = client.get("/this-route-does-not-exist")
    assert r.status_code == 404

    payload = r.json()
    assert "request_id" in payload
    assert payload["request_id"], payload

    assert r.headers.get("x-request-id") == payload["request_id"]


def test_caller_supplied_request_id_is_echoed():
    client = TestClient(app)

    r = client.get("/api/v1/applications", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 401
    assert r.json()["request_id"] == "req-123"
    assert r.headers["x-request-id"] == "req-123"


def test_missing_identity_is_unauthorized_with_code():
    client = TestClient(app)

    r = client.get("/api/v1/admin/payments/ready")
    assert r.status_code == 401
    assert r.json()["code"] == "UNAUTHORIZED"


def test_member_role_cannot_reach_admin_routes():
    client = TestClient(app)

    headers = {"X-Member-Id": str(uuid.uuid4()), "X-Member-Role": "MEMBER"}
    r = client.get("/api/v1/admin/payments/ready", headers=headers)
    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN"


def test_bad_identity_header_is_unauthorized():
    client = TestClient(app)

    r = client.get("/api/v1/applications", headers={"X-Member-Id": "not-a-uuid"})
    assert r.status_code == 401

    r = client.get(
        "/api/v1/applications",
        headers={"X-Member-Id": str(uuid.uuid4()), "X-Member-Role": "SUPERUSER"},
    )
    assert r.status_code == 401
