from datetime import datetime

import pytest
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from dealership.core.result import Err, ErrorKind, Ok
from dealership.db.init_db import init_db
from dealership.db.session import Database
from dealership.models import LedgerTransaction, ServiceAppointment, Vehicle

from conftest import API


@pytest.fixture
def database():
    """SQLite with foreign keys enforced, the way PostgreSQL enforces them."""
    db = Database("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    @event.listens_for(db.engine, "connect")
    def enforce_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_db(db)
    yield db
    db.dispose()


def add_vehicle(vin):
    def body(session):
        row = Vehicle(vin=vin, make="Ford", model="Focus", year=2019)
        session.add(row)
        session.flush()
        return Ok(row.id)
    return body


# Database.transaction

def test_ok_result_commits(database):
    result = database.transaction(add_vehicle("1FADP3F20JL123456"))

    assert isinstance(result, Ok)
    with database.session() as session:
        assert session.get(Vehicle, result.value) is not None


def test_err_result_rolls_back(database):
    def body(session):
        add_vehicle("1FADP3F20JL123456")(session)
        return Err(ErrorKind.BUSINESS_RULE, "changed my mind")

    result = database.transaction(body)

    assert result.kind == ErrorKind.BUSINESS_RULE
    with database.session() as session:
        assert session.query(Vehicle).count() == 0


def test_duplicate_key_is_a_conflict(database):
    database.transaction(add_vehicle("1FADP3F20JL123456"))

    result = database.transaction(add_vehicle("1FADP3F20JL123456"))

    assert result.kind == ErrorKind.CONFLICT
    assert result.detail == "Conflicting record already exists"


def test_broken_reference_is_not_a_conflict(database):
    def body(session):
        session.add(ServiceAppointment(
            customer_id="no-such-customer",
            vehicle_id="no-such-vehicle",
            appointment_date=datetime(2026, 11, 3, 9, 30),
            service_type="Oil Change",
        ))
        session.flush()
        return Ok(None)

    result = database.transaction(body)

    assert result.kind == ErrorKind.VALIDATION
    assert result.status_code == 400
    with database.session() as session:
        assert session.query(ServiceAppointment).count() == 0


def test_unexpected_exception_is_internal(database):
    def body(session):
        add_vehicle("1FADP3F20JL123456")(session)
        raise RuntimeError("boom")

    result = database.transaction(body)

    assert result.kind == ErrorKind.INTERNAL
    assert result.detail == "Internal server error"
    with database.session() as session:
        assert session.query(Vehicle).count() == 0


# Unknown references are reported as missing, not as duplicates

def appointment_body(customer, vehicle, when, **extra):
    body = {
        "customer_id": customer.id,
        "vehicle_id": vehicle.id,
        "appointment_date": when,
        "service_type": "Oil Change",
    }
    body.update(extra)
    return body


def test_appointment_with_unknown_technician_is_not_found(client, database, headers, customer, vehicle, appointment_time):
    response = client.post(f"{API}/service/appointments", json=appointment_body(
        customer, vehicle, appointment_time, assigned_technician_id="no-such-user",
    ), headers=headers["service_manager"])

    assert response.status_code == 404
    assert response.json()["error"] == "Technician not found"
    with database.session() as session:
        assert session.query(ServiceAppointment).count() == 0


def test_reassigning_an_appointment_to_an_unknown_technician_is_not_found(
    client, headers, users, customer, vehicle, appointment_time
):
    created = client.post(f"{API}/service/appointments", json=appointment_body(
        customer, vehicle, appointment_time, assigned_technician_id=users["technician"].id,
    ), headers=headers["service_manager"]).json()["data"]

    response = client.put(f"{API}/service/appointments/{created['id']}",
                          json={"assigned_technician_id": "no-such-user"}, headers=headers["service_manager"])

    assert response.status_code == 404
    assert response.json()["error"] == "Technician not found"


def test_ledger_entry_for_unknown_customer_is_not_found(client, database, headers):
    response = client.post(f"{API}/transactions", json={
        "type": "payment", "amount": 250, "payment_method": "cash", "customer_id": "no-such-customer",
    }, headers=headers["accountant"])

    assert response.status_code == 404
    assert response.json()["error"] == "Customer not found"
    with database.session() as session:
        assert session.query(LedgerTransaction).count() == 0


def test_labor_line_with_unknown_part_is_not_found(client, headers, users, customer, vehicle):
    order = client.post(f"{API}/service/repair-orders", json={
        "customer_id": customer.id, "vehicle_id": vehicle.id, "technician_id": users["technician"].id,
    }, headers=headers["service_manager"]).json()["data"]

    response = client.post(f"{API}/service/repair-orders/{order['id']}/items", json={
        "type": "labor", "description": "Fit pads", "quantity": 1, "unit_price": 80, "part_id": "no-such-part",
    }, headers=headers["technician"])

    assert response.status_code == 404
    assert response.json()["error"] == "Part not found"


def test_vehicle_with_service_records_cannot_be_deleted(client, database, headers, customer, vehicle, appointment_time):
    client.post(f"{API}/service/appointments", json=appointment_body(customer, vehicle, appointment_time),
                headers=headers["service_manager"])

    response = client.delete(f"{API}/vehicles/{vehicle.id}", headers=headers["admin"])

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete vehicle with associated records"
    with database.session() as session:
        assert session.get(Vehicle, vehicle.id) is not None
