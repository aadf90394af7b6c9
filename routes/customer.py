from flask import Blueprint, request, jsonify, g

from security.rbac import customer_required
from scheduling.lifecycle import cancel_appointment
from scheduling.queries import get_customer_appointment, list_customer_appointments
from utils.audit import log_event
from utils.serialize import appointment_json

customer_bp = Blueprint("customer", __name__, url_prefix="/customer")


# ---------- CUSTOMER: my appointments ----------
@customer_bp.get("/appointments")
@customer_required
def my_appointments():
    status = (request.args.get("status") or "").strip().lower() or None
    upcoming = (request.args.get("upcoming") or "").lower() == "true"

    rows = list_customer_appointments(g.user.id, status=status, upcoming=upcoming)
    return jsonify([appointment_json(a) for a in rows]), 200


@customer_bp.get("/appointments/<appointment_id>")
@customer_required
def my_appointment(appointment_id: str):
    return jsonify(appointment_json(get_customer_appointment(g.user.id, appointment_id))), 200


# ---------- CUSTOMER: cancel (pending/confirmed only) ----------
@customer_bp.patch("/appointments/<appointment_id>/cancel")
@customer_required
def cancel_my_appointment(appointment_id: str):
    appt = cancel_appointment(appointment_id, g.user)

    log_event("APPOINTMENT_CANCEL", user_id=g.user.id, entity="appointment", entity_id=appt.id)
    return jsonify(
        message="Appointment cancelled successfully",
        appointment=appointment_json(appt),
    ), 200
