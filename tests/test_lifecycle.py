import pytest

from models import db
from models.appointment import Appointment
from scheduling.errors import InvalidTransitionError, NotFoundError
from scheduling.lifecycle import ALLOWED_TRANSITIONS, cancel_appointment, set_status


def _status(app, appt_id):
    with app.app_context():
        return db.session.get(Appointment, appt_id).status


# ---------- customer cancel ----------

@pytest.mark.parametrize("status", ["pending", "confirmed"])
def test_customer_cancels_own_active_appointment(app, customer_client, customer_id, add_appointment, next_monday, status):
    appt_id = add_appointment(next_monday, 9 * 60, status=status, customer_id=customer_id)

    resp = customer_client.patch(f"/customer/appointments/{appt_id}/cancel", headers=customer_client.csrf_headers)

    assert resp.status_code == 200
    assert resp.get_json()["appointment"]["status"] == "cancelled"
    assert _status(app, appt_id) == "cancelled"


@pytest.mark.parametrize("status", ["completed", "cancelled", "no_show"])
def test_customer_cannot_cancel_closed_appointment(app, customer_client, customer_id, add_appointment, next_monday, status):
    appt_id = add_appointment(next_monday, 9 * 60, status=status, customer_id=customer_id)

    resp = customer_client.patch(f"/customer/appointments/{appt_id}/cancel", headers=customer_client.csrf_headers)

    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Cannot cancel this appointment"
    assert _status(app, appt_id) == status


def test_customer_cannot_cancel_someone_elses(app, customer_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)  # anonymous booking

    resp = customer_client.patch(f"/customer/appointments/{appt_id}/cancel", headers=customer_client.csrf_headers)

    assert resp.status_code == 404
    assert _status(app, appt_id) == "pending"


def test_cancel_requires_login(client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)
    assert client.patch(f"/customer/appointments/{appt_id}/cancel").status_code == 401


def test_cancel_service_rejects_missing(app_ctx):
    with pytest.raises(NotFoundError):
        cancel_appointment("does-not-exist", None)


# ---------- admin status ----------

def test_admin_may_set_any_status(app, admin_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60, status="completed")

    resp = admin_client.patch(
        f"/appointments/admin/{appt_id}/status",
        json={"status": "pending"},
        headers=admin_client.csrf_headers,
    )

    assert resp.status_code == 200
    assert resp.get_json()["appointment"]["status"] == "pending"


def test_admin_status_must_be_known(admin_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)
    resp = admin_client.patch(
        f"/appointments/admin/{appt_id}/status",
        json={"status": "archived"},
        headers=admin_client.csrf_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid status"


def test_admin_status_unknown_appointment(admin_client):
    resp = admin_client.patch(
        "/appointments/admin/nope/status",
        json={"status": "confirmed"},
        headers=admin_client.csrf_headers,
    )
    assert resp.status_code == 404


def test_reactivating_into_taken_slot_conflicts(admin_client, add_appointment, next_monday):
    old_id = add_appointment(next_monday, 9 * 60, status="cancelled")
    add_appointment(next_monday, 9 * 60, status="pending")

    resp = admin_client.patch(
        f"/appointments/admin/{old_id}/status",
        json={"status": "confirmed"},
        headers=admin_client.csrf_headers,
    )
    assert resp.status_code == 409


def test_customer_cannot_use_admin_status(customer_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)
    resp = customer_client.patch(
        f"/appointments/admin/{appt_id}/status",
        json={"status": "confirmed"},
        headers=customer_client.csrf_headers,
    )
    assert resp.status_code == 403


def test_strict_transitions(app_ctx, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60, status="completed")

    with pytest.raises(InvalidTransitionError):
        set_status(appt_id, "pending", strict=True)

    appt_id = add_appointment(next_monday, 10 * 60, status="pending")
    row, previous = set_status(appt_id, "confirmed", strict=True)
    assert (previous, row.status) == ("pending", "confirmed")


def test_strict_transitions_from_config(app, admin_client, add_appointment, next_monday):
    app.config["STRICT_STATUS_TRANSITIONS"] = True
    appt_id = add_appointment(next_monday, 9 * 60, status="cancelled")

    resp = admin_client.patch(
        f"/appointments/admin/{appt_id}/status",
        json={"status": "confirmed"},
        headers=admin_client.csrf_headers,
    )
    assert resp.status_code == 403


def test_terminal_states_have_no_exits():
    for terminal in ("completed", "cancelled", "no_show"):
        assert ALLOWED_TRANSITIONS[terminal] == set()


# ---------- admin edit / delete ----------

def test_admin_edit_fields(admin_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)

    resp = admin_client.put(
        f"/appointments/admin/{appt_id}",
        json={"notes": "Customer waiting", "vehicle_make": "Ford", "appointment_time": "3:00 PM"},
        headers=admin_client.csrf_headers,
    )

    assert resp.status_code == 200
    appt = resp.get_json()["appointment"]
    assert appt["notes"] == "Customer waiting"
    assert appt["vehicle_make"] == "Ford"
    assert appt["appointment_time"] == "3:00 PM"


def test_admin_edit_cannot_double_book(admin_client, add_appointment, next_monday):
    add_appointment(next_monday, 9 * 60)
    other_id = add_appointment(next_monday, 10 * 60)

    resp = admin_client.put(
        f"/appointments/admin/{other_id}",
        json={"appointment_time": "9:00 AM"},
        headers=admin_client.csrf_headers,
    )
    assert resp.status_code == 409


def test_admin_edit_rejects_closed_hours(admin_client, add_appointment, next_monday, next_weekday):
    appt_id = add_appointment(next_monday, 9 * 60)

    resp = admin_client.put(
        f"/appointments/admin/{appt_id}",
        json={"appointment_date": next_weekday(6).isoformat()},
        headers=admin_client.csrf_headers,
    )
    assert resp.status_code == 400


def test_admin_edit_cannot_clear_required(admin_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)

    resp = admin_client.put(
        f"/appointments/admin/{appt_id}",
        json={"customer_name": None},
        headers=admin_client.csrf_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["details"] == [{"field": "customer_name", "message": "Cannot be empty"}]


def test_admin_delete(app, admin_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)

    resp = admin_client.delete(f"/appointments/admin/{appt_id}", headers=admin_client.csrf_headers)
    assert resp.status_code == 200

    with app.app_context():
        assert db.session.get(Appointment, appt_id) is None

    again = admin_client.delete(f"/appointments/admin/{appt_id}", headers=admin_client.csrf_headers)
    assert again.status_code == 404


def test_admin_mutation_requires_csrf(admin_client, add_appointment, next_monday):
    appt_id = add_appointment(next_monday, 9 * 60)
    assert admin_client.delete(f"/appointments/admin/{appt_id}").status_code == 403
