# tests/conftest.py

import os
import tempfile

# Configure the app for an isolated in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="techflow-uploads-")
os.environ["CACHE_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

from datetime import datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from techflow.auth import create_access_token, hash_password  # noqa: E402
from techflow.database import Base, SessionLocal, engine  # noqa: E402
from techflow.main import app  # noqa: E402
from techflow.models import (  # noqa: E402
    Customer,
    Employee,
    ServiceOrder,
    ServiceOrderAssignment,
    ServiceOrderItem,
    ServiceType,
    User,
)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db(setup_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def _make_user(db, email: str, role: str, password: str = "password123") -> User:
    user = User(
        email=email,
        full_name=email.split("@")[0].title(),
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin_user(db) -> User:
    return _make_user(db, "admin@techflow.test", "admin")


@pytest.fixture()
def staff_user(db) -> User:
    return _make_user(db, "staff@techflow.test", "staff")


@pytest.fixture()
def auth_headers(admin_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(admin_user)}"}


@pytest.fixture()
def staff_headers(staff_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(staff_user)}"}


# ----------------------------------------------------------------------------
# Factories
# ----------------------------------------------------------------------------


@pytest.fixture()
def make_customer(db):
    counter = {"n": 0}

    def _make(**overrides) -> Customer:
        counter["n"] += 1
        data = {
            "name": f"Customer {counter['n']}",
            "email": f"customer{counter['n']}@example.com",
            "phone": "+251911000000",
            "company": "Acme PLC",
        }
        data.update(overrides)
        customer = Customer(**data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    return _make


@pytest.fixture()
def make_employee(db):
    counter = {"n": 0}

    def _make(**overrides) -> Employee:
        counter["n"] += 1
        data = {
            "name": f"Technician {counter['n']}",
            "email": f"tech{counter['n']}@techflow.test",
            "phone": f"+25191100{counter['n']:04d}",
            "specification": "technician",
            "status": "active",
        }
        data.update(overrides)
        employee = Employee(**data)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture()
def make_service_type(db):
    counter = {"n": 0}

    def _make(**overrides) -> ServiceType:
        counter["n"] += 1
        name = overrides.pop("name", f"Service {counter['n']}")
        data = {"name": name, "slug": f"service-{counter['n']}", "description": "Test service"}
        data.update(overrides)
        service_type = ServiceType(**data)
        db.add(service_type)
        db.commit()
        db.refresh(service_type)
        return service_type

    return _make


@pytest.fixture()
def make_order(db, make_customer, make_service_type):
    """Insert an order directly; pass assignees=[employee, ...] to assign it"""

    def _make(assignees=(), items=(), **overrides) -> ServiceOrder:
        if "customer_id" not in overrides:
            overrides["customer_id"] = make_customer().id
        if "service_type_id" not in overrides:
            overrides["service_type_id"] = make_service_type().id
        data = {"priority": "medium", "status": "new", "description": "Fix the network"}
        data.update(overrides)

        order = ServiceOrder(**data)
        for employee in assignees:
            order.assignments.append(
                ServiceOrderAssignment(employee_id=employee.id, assigned_at=datetime.utcnow())
            )
        for service_type_id, quantity, unit_price in items:
            price = Decimal(str(unit_price))
            order.items.append(
                ServiceOrderItem(
                    service_type_id=service_type_id,
                    quantity=quantity,
                    unit_price=price,
                    total_price=price * quantity,
                )
            )
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make
