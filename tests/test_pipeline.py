from fastapi.testclient import TestClient

from dealership.db.session import Database
from dealership.main import create_app
from dealership.models import AuditLogEntry, Customer
from dealership.services.audit import AuditRecorder

from conftest import API


def test_permission_is_checked_before_anything_is_read(client, headers):
    # Neither the customer nor the vehicle exists and the body is incomplete,
    # yet the caller only learns that the role is not allowed.
    response = client.post(f"{API}/sales", json={"customer_id": "nope"}, headers=headers["technician"])

    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Forbidden: missing permission CREATE_SALES"}


def test_authentication_is_checked_before_validation(client):
    response = client.post(f"{API}/vehicles", json={"vin": "bad"})

    assert response.status_code == 401


def test_forbidden_read_of_a_missing_row_is_still_forbidden(client, headers):
    response = client.get(f"{API}/vehicles/does-not-exist", headers=headers["technician"])

    assert response.status_code == 403


def test_missing_fields_are_listed(client, headers):
    response = client.post(f"{API}/vehicles", json={"make": "Honda"}, headers=headers["inventory_manager"])

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: vin, model, year"


def test_wrongly_typed_field_is_a_validation_error(client, headers):
    response = client.post(f"{API}/vehicles", json={
        "vin": "1HGCM82633A004352", "make": "Honda", "model": "Accord", "year": "last year",
    }, headers=headers["inventory_manager"])

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_non_object_body_is_rejected(client, headers):
    response = client.post(f"{API}/customers", json=["not", "an", "object"], headers=headers["sales"])

    assert response.status_code == 400
    assert response.json()["error"] == "Request body must be a JSON object"


def test_invalid_json_is_reported_in_the_envelope(client):
    response = client.post(
        f"{API}/auth/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid JSON in request body"}


def test_audit_failure_does_not_undo_the_mutation(database, headers):
    def broken_factory():
        raise RuntimeError("audit store unreachable")

    app = create_app(database=database, audit=AuditRecorder(broken_factory))
    client = TestClient(app)

    response = client.post(f"{API}/customers", json={
        "name": "Riley Park", "email": "riley@example.com", "phone": "555-777-1212",
    }, headers=headers["sales"])

    assert response.status_code == 201
    with database.session() as session:
        assert session.query(Customer).filter_by(email="riley@example.com").count() == 1
        assert session.query(AuditLogEntry).count() == 0


def test_health_reports_database_online(client):
    response = client.get(f"{API}/health")

    assert response.status_code == 200
    assert response.json()["database"] == "online"


def test_health_hides_database_errors():
    unreachable = Database("sqlite:////no-such-directory/dealership.db")
    client = TestClient(create_app(database=unreachable))

    response = client.get(f"{API}/health")

    assert response.status_code == 200
    assert response.json() == {"status": "unhealthy", "api": "online", "database": "offline"}
