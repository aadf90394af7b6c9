from flask import Blueprint, request, jsonify, current_app

from security.rbac import admin_required
from scheduling.availability import get_available_slots, parse_day
from scheduling.booking import create_appointment
from scheduling.lifecycle import set_status, update_appointment, delete_appointment
from scheduling.notifications import notify_booking_created, notify_status_changed
from scheduling.queries import appointment_stats, get_appointment, list_appointments
from scheduling.slots import business_hours_json, format_slot
from utils.audit import events_for, log_event
from utils.auth_context import current_customer
from utils.serialize import appointment_json

appointments_bp = Blueprint("appointments", __name__, url_prefix="/appointments")


# ---------- PUBLIC: open slots for a date ----------
@appointments_bp.get("/available-slots")
def available_slots():
    day = parse_day(request.args.get("date"))
    hours = business_hours_json(day)
    slots = [format_slot(m) for m in get_available_slots(day)]

    body = {
        "date": day.isoformat(),
        "available_slots": slots,
        "business_hours": hours,
    }
    if hours is None:
        body["message"] = "Shop is closed on this day"
    return jsonify(body), 200


# ---------- PUBLIC: book (links to the customer account when logged in) ----------
@appointments_bp.post("")
def book_appointment():
    data = request.get_json(silent=True)
    customer = current_customer()

    appt = create_appointment(data, account=customer)

    log_event(
        "APPOINTMENT_CREATE",
        user_id=customer.id if customer else None,
        entity="appointment",
        entity_id=appt.id,
        metadata={"date": appt.appointment_date.isoformat(), "time": format_slot(appt.start_minutes)},
    )
    notify_booking_created(appt)

    return jsonify(
        message="Appointment booked successfully! We will contact you shortly to confirm.",
        appointment=appointment_json(appt),
    ), 201


# ---------- ADMIN: list with filters + pagination ----------
@appointments_bp.get("/admin/all")
@admin_required
def admin_list():
    status = (request.args.get("status") or "").strip().lower() or None
    date_str = request.args.get("date")
    day = parse_day(date_str) if date_str else None

    default_limit = current_app.config.get("APPOINTMENTS_PAGE_SIZE", 20)
    max_limit = current_app.config.get("APPOINTMENTS_MAX_PAGE_SIZE", 100)
    page = max(1, request.args.get("page", type=int) or 1)
    limit = request.args.get("limit", type=int) or default_limit
    limit = max(1, min(limit, max_limit))

    rows, pagination = list_appointments(status=status, day=day, page=page, limit=limit)
    return jsonify(
        appointments=[appointment_json(a) for a in rows],
        pagination=pagination,
    ), 200


@appointments_bp.get("/admin/stats")
@admin_required
def admin_stats():
    return jsonify(appointment_stats()), 200


@appointments_bp.get("/admin/<appointment_id>")
@admin_required
def admin_get(appointment_id: str):
    return jsonify(appointment_json(get_appointment(appointment_id))), 200


# ---------- ADMIN: status change ----------
@appointments_bp.patch("/admin/<appointment_id>/status")
@admin_required
def admin_set_status(appointment_id: str):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if isinstance(status, str):
        status = status.strip().lower()

    appt, previous = set_status(appointment_id, status)

    log_event(
        "APPOINTMENT_STATUS_UPDATE",
        entity="appointment",
        entity_id=appt.id,
        metadata={"from": previous, "to": appt.status},
    )
    if previous != appt.status:
        notify_status_changed(appt)

    return jsonify(
        message="Appointment status updated successfully",
        appointment=appointment_json(appt),
    ), 200


# ---------- ADMIN: edit details ----------
@appointments_bp.put("/admin/<appointment_id>")
@admin_required
def admin_update(appointment_id: str):
    data = request.get_json(silent=True)
    appt = update_appointment(appointment_id, data)

    log_event(
        "APPOINTMENT_UPDATE",
        entity="appointment",
        entity_id=appt.id,
        metadata={"fields": sorted((data or {}).keys())},
    )
    return jsonify(
        message="Appointment updated successfully",
        appointment=appointment_json(appt),
    ), 200


# ---------- ADMIN: hard delete ----------
@appointments_bp.delete("/admin/<appointment_id>")
@admin_required
def admin_delete(appointment_id: str):
    delete_appointment(appointment_id)
    log_event("APPOINTMENT_DELETE", entity="appointment", entity_id=appointment_id)
    return jsonify(message="Appointment deleted successfully"), 200


# ---------- ADMIN: audit trail (kept after delete) ----------
@appointments_bp.get("/admin/<appointment_id>/history")
@admin_required
def admin_history(appointment_id: str):
    events = events_for("appointment", appointment_id)
    if not events:
        get_appointment(appointment_id)  # 404 for ids we never saw
    return jsonify(appointment_id=appointment_id, events=events), 200
