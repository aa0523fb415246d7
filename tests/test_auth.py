from datetime import timedelta

from dealership.core.security import create_access_token
from dealership.models import AuditLogEntry, User

from conftest import API, PASSWORD


def test_register_returns_user_and_token(client):
    response = client.post(f"{API}/auth/register", json={
        "email": "New.Hire@Dealer.test",
        "password": "hunter22",
        "name": "New Hire",
        "role": "sales",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "new.hire@dealer.test"
    assert "password_hash" not in body["data"]["user"]
    assert body["data"]["token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['data']['token']}"})
    assert me.json()["data"]["role"] == "sales"


def test_register_rejects_duplicate_email(client, users):
    response = client.post(f"{API}/auth/register", json={
        "email": "SALES@dealer.test", "password": "hunter22", "name": "Dup", "role": "sales",
    })

    assert response.status_code == 409
    assert response.json() == {"success": False, "error": "User with this email already exists"}


def test_register_validates_role_and_password(client):
    bad_role = client.post(f"{API}/auth/register", json={
        "email": "x@dealer.test", "password": "hunter22", "name": "X", "role": "driver",
    })
    short_password = client.post(f"{API}/auth/register", json={
        "email": "x@dealer.test", "password": "abc", "name": "X", "role": "sales",
    })
    missing = client.post(f"{API}/auth/register", json={"email": "x@dealer.test"})

    assert bad_role.status_code == 400
    assert bad_role.json()["error"].startswith("Invalid role")
    assert short_password.status_code == 400
    assert missing.json()["error"] == "Missing required fields: password, name, role"


def test_login_issues_token_and_records_login(client, database, users):
    response = client.post(
        f"{API}/auth/login",
        json={"email": "sales@dealer.test", "password": PASSWORD},
        headers={"X-Forwarded-For": "203.0.113.50"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["token"]
    with database.session() as session:
        entry = session.query(AuditLogEntry).filter_by(action="LOGIN").one()
        assert entry.entity_id == users["sales"].id
        assert entry.ip_address == "203.0.113.50"


def test_login_with_wrong_password_is_unauthorized(client, users):
    response = client.post(f"{API}/auth/login", json={"email": "sales@dealer.test", "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid email or password"


def test_login_requires_both_fields(client):
    response = client.post(f"{API}/auth/login", json={"email": "sales@dealer.test"})

    assert response.status_code == 400
    assert response.json()["error"] == "Email and password are required"


def test_missing_token_is_unauthorized(client):
    response = client.get(f"{API}/auth/me")

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized"}


def test_garbage_and_expired_tokens_are_unauthorized(client, users):
    expired = create_access_token(users["admin"], expires_delta=timedelta(minutes=-5))

    garbage = client.get(f"{API}/customers", headers={"Authorization": "Bearer not-a-jwt"})
    stale = client.get(f"{API}/customers", headers={"Authorization": f"Bearer {expired}"})

    assert garbage.status_code == 401
    assert stale.status_code == 401


def test_token_for_deleted_user_is_unauthorized(client, database, users, headers):
    with database.session() as session:
        session.delete(session.get(User, users["admin"].id))
        session.commit()

    response = client.get(f"{API}/customers", headers=headers["admin"])

    assert response.status_code == 401


def test_logout_is_audited(client, database, users, headers):
    response = client.post(f"{API}/auth/logout", headers=headers["technician"])

    assert response.status_code == 200
    with database.session() as session:
        entry = session.query(AuditLogEntry).filter_by(action="LOGOUT").one()
        assert entry.user_id == users["technician"].id
