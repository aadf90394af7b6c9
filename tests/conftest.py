from datetime import date, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.appointment import Appointment
from models.user import User, Role
from security.password import hash_password

CUSTOMER_EMAIL = "jane@x.com"
CUSTOMER_PASSWORD = "brakes2024"
ADMIN_EMAIL = "owner@shop.com"
ADMIN_PASSWORD = "torque2024"


def _next_weekday(weekday: int, today: date = None) -> date:
    """First date strictly after ``today`` that falls on ``weekday`` (Monday = 0)."""
    today = today or date.today()
    days_ahead = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days_ahead)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def next_weekday():
    return _next_weekday


@pytest.fixture
def next_monday():
    return _next_weekday(0)


def _create_user(app, email, password, role_names, **fields):
    with app.app_context():
        user = User(email=email, password_hash=hash_password(password), **fields)
        user.roles = Role.query.filter(Role.name.in_(role_names)).all()
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture
def customer_id(app):
    return _create_user(
        app, CUSTOMER_EMAIL, CUSTOMER_PASSWORD, ["CUSTOMER"],
        full_name="Jane Doe", phone_number="2145551234",
    )


@pytest.fixture
def admin_id(app):
    return _create_user(app, ADMIN_EMAIL, ADMIN_PASSWORD, ["ADMIN"], full_name="Shop Owner")


def _login(app, email, password):
    client = app.test_client()
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    client.csrf_headers = {"X-CSRF-Token": client.get_cookie("csrf_token").value}
    return client


@pytest.fixture
def customer_client(app, customer_id):
    return _login(app, CUSTOMER_EMAIL, CUSTOMER_PASSWORD)


@pytest.fixture
def admin_client(app, admin_id):
    return _login(app, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def booking_body(next_monday):
    return {
        "customer_name": "Jane Doe",
        "email": "jane@x.com",
        "phone": "2145551234",
        "service_type": "Oil Change",
        "appointment_date": next_monday.isoformat(),
        "appointment_time": "9:00 AM",
    }


@pytest.fixture
def add_appointment(app):
    """Insert an appointment row directly, bypassing booking rules."""
    def _add(day, minutes, status="pending", customer_id=None, **fields):
        values = {
            "customer_name": "Walk In",
            "email": "walkin@x.com",
            "phone": "2145550000",
            "service_type": "Inspection",
        }
        values.update(fields)
        with app.app_context():
            row = Appointment(
                appointment_date=day,
                start_minutes=minutes,
                status=status,
                customer_id=customer_id,
                **values,
            )
            db.session.add(row)
            db.session.commit()
            return row.id
    return _add
