from datetime import date, timedelta

import pytest

from models import db
from models.appointment import Appointment
from models.audit_log import AuditLog


def _fields(resp):
    return {d["field"] for d in resp.get_json().get("details", [])}


def test_book_open_slot(client, booking_body, next_monday):
    resp = client.post("/appointments", json=booking_body)

    assert resp.status_code == 201
    appt = resp.get_json()["appointment"]
    assert appt["status"] == "pending"
    assert appt["appointment_time"] == "9:00 AM"
    assert appt["appointment_date"] == next_monday.isoformat()
    assert appt["duration"] == 60
    assert appt["customer_id"] is None
    assert len(appt["id"]) == 36

    slots = client.get(f"/appointments/available-slots?date={next_monday.isoformat()}").get_json()
    assert "9:00 AM" not in slots["available_slots"]


def test_second_booking_same_slot_conflicts(client, booking_body):
    assert client.post("/appointments", json=booking_body).status_code == 201

    again = dict(booking_body, customer_name="John Roe", email="john@x.com")
    resp = client.post("/appointments", json=again)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "This time slot is no longer available"


def test_unique_index_blocks_race(app, client, booking_body, monkeypatch):
    # both requests pass the availability re-check, as two concurrent ones would
    monkeypatch.setattr(
        "scheduling.booking.get_available_slots",
        lambda day: [h * 60 for h in range(8, 18)],
    )
    assert client.post("/appointments", json=booking_body).status_code == 201
    resp = client.post("/appointments", json=booking_body)
    assert resp.status_code == 409

    with app.app_context():
        assert Appointment.query.count() == 1


def test_slot_rebookable_after_cancel(client, booking_body, add_appointment, next_monday):
    add_appointment(next_monday, 9 * 60, status="cancelled")
    assert client.post("/appointments", json=booking_body).status_code == 201


def test_zero_padded_and_camel_case_body(client, next_monday):
    body = {
        "customerName": "Jane Doe",
        "email": "jane@x.com",
        "phone": "2145551234",
        "serviceType": "Brake Service",
        "appointmentDate": next_monday.isoformat(),
        "appointmentTime": "02:00 PM",
        "vehicleYear": "2019",
        "vehicleMake": "Toyota",
        "vehicleModel": "Camry",
        "duration": 90,
    }
    resp = client.post("/appointments", json=body)

    assert resp.status_code == 201, resp.get_json()
    appt = resp.get_json()["appointment"]
    assert appt["appointment_time"] == "2:00 PM"
    assert appt["vehicle_year"] == 2019
    assert appt["duration"] == 90


@pytest.mark.parametrize("offset", [0, -1, -30])
def test_rejects_today_and_past(client, booking_body, offset):
    booking_body["appointment_date"] = (date.today() + timedelta(days=offset)).isoformat()
    resp = client.post("/appointments", json=booking_body)

    assert resp.status_code == 400
    assert "appointment_date" in _fields(resp)


def test_rejects_time_outside_hours(client, booking_body):
    booking_body["appointment_time"] = "7:00 AM"
    resp = client.post("/appointments", json=booking_body)

    assert resp.status_code == 400
    assert _fields(resp) == {"appointment_time"}


def test_rejects_half_hour_time(client, booking_body):
    booking_body["appointment_time"] = "9:30 AM"
    assert client.post("/appointments", json=booking_body).status_code == 400


def test_rejects_sunday(client, booking_body, next_weekday):
    booking_body["appointment_date"] = next_weekday(6).isoformat()
    resp = client.post("/appointments", json=booking_body)

    assert resp.status_code == 400
    detail = resp.get_json()["details"][0]
    assert detail == {"field": "appointment_time", "message": "Shop is closed on this day"}


def test_all_field_errors_reported_together(client, booking_body):
    booking_body.update(
        customer_name="J",
        email="not-an-email",
        phone="123",
        duration=15,
        notes="x" * 1001,
        vehicle_year=1850,
    )
    resp = client.post("/appointments", json=booking_body)

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Validation failed"
    assert {"customer_name", "email", "phone", "duration", "notes", "vehicle_year"} <= _fields(resp)


def test_missing_body(client):
    resp = client.post("/appointments", data="nope", content_type="text/plain")
    assert resp.status_code == 400


def test_status_in_body_is_ignored(client, booking_body):
    booking_body["status"] = "confirmed"
    resp = client.post("/appointments", json=booking_body)
    assert resp.get_json()["appointment"]["status"] == "pending"


def test_logged_in_customer_is_linked_and_prefilled(app, customer_client, customer_id, next_monday):
    body = {
        "service_type": "Tire Rotation",
        "appointment_date": next_monday.isoformat(),
        "appointment_time": "10:00 AM",
    }
    resp = customer_client.post("/appointments", json=body, headers=customer_client.csrf_headers)

    assert resp.status_code == 201, resp.get_json()
    appt = resp.get_json()["appointment"]
    assert appt["customer_id"] == customer_id
    assert appt["customer_name"] == "Jane Doe"
    assert appt["email"] == "jane@x.com"
    assert appt["phone"] == "2145551234"


def test_submitted_contact_overrides_profile(customer_client, booking_body):
    booking_body["customer_name"] = "Jane Q. Doe"
    resp = customer_client.post("/appointments", json=booking_body, headers=customer_client.csrf_headers)
    assert resp.get_json()["appointment"]["customer_name"] == "Jane Q. Doe"


def test_logged_in_booking_requires_csrf(customer_client, booking_body):
    resp = customer_client.post("/appointments", json=booking_body)
    assert resp.status_code == 403


def test_booking_is_audited(app, client, booking_body):
    appt_id = client.post("/appointments", json=booking_body).get_json()["appointment"]["id"]

    with app.app_context():
        row = AuditLog.query.filter_by(action="APPOINTMENT_CREATE").one()
        assert row.entity_id == appt_id
        assert db.session.get(Appointment, appt_id).status == "pending"
