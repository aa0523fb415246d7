from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from dealership.core.permissions import Role
from dealership.core.security import create_access_token, hash_password
from dealership.db.init_db import init_db
from dealership.db.session import Database
from dealership.main import create_app
from dealership.models import Customer, Part, User, Vehicle

API = "/api/v1"
PASSWORD = "secret123"


@pytest.fixture
def database():
    db = Database("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(db)
    yield db
    db.dispose()


@pytest.fixture
def app(database):
    return create_app(database=database)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_user(database):
    def _make_user(role, email=None, name=None):
        with database.session() as session:
            user = User(
                email=email or f"{role}@dealer.test",
                password_hash=hash_password(PASSWORD),
                name=name or role.replace("_", " ").title(),
                role=role,
            )
            session.add(user)
            session.commit()
            return user
    return _make_user


@pytest.fixture
def users(make_user):
    return {role.value: make_user(role.value) for role in Role}


@pytest.fixture
def headers(users):
    return {role: bearer(user) for role, user in users.items()}


def bearer(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def customer(database):
    with database.session() as session:
        row = Customer(name="Dana Whitfield", email="dana@example.com", phone="555-201-3344", zip="30301")
        session.add(row)
        session.commit()
        return row


@pytest.fixture
def vehicle(database):
    with database.session() as session:
        row = Vehicle(
            vin="1HGCM82633A004352",
            make="Honda",
            model="Accord",
            year=2021,
            mileage=24000,
            purchase_price=18000.0,
            sale_price=22500.0,
        )
        session.add(row)
        session.commit()
        return row


@pytest.fixture
def part(database):
    with database.session() as session:
        row = Part(
            part_number="BRK-1001",
            description="Front brake pads",
            category="Brakes",
            quantity_on_hand=12,
            reorder_level=5,
            cost=30.0,
            retail_price=55.0,
        )
        session.add(row)
        session.commit()
        return row


@pytest.fixture
def appointment_time():
    return datetime(2026, 11, 3, 9, 30).isoformat()


@pytest.fixture
def auth_for():
    return bearer
