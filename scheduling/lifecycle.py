"""Status changes, edits and removal of existing appointments.

Admins may move an appointment between any two statuses unless
``STRICT_STATUS_TRANSITIONS`` is enabled, in which case
``ALLOWED_TRANSITIONS`` applies. Customers may only cancel their own
pending or confirmed appointments.
"""
import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.appointment import APPOINTMENT_STATUSES
from scheduling import repository
from scheduling.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from scheduling.schemas import AppointmentUpdate, parse_payload
from scheduling.slots import slots_for

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled", "no_show"},
    "confirmed": {"completed", "cancelled", "no_show"},
    "completed": set(),
    "cancelled": set(),
    "no_show": set(),
}

CUSTOMER_CANCELLABLE = ("pending", "confirmed")

# columns that can be edited but never cleared
_NOT_NULL_FIELDS = (
    "customer_name", "email", "phone", "service_type",
    "appointment_date", "appointment_time", "duration", "status",
)


def _strict_transitions(strict):
    if strict is not None:
        return strict
    return bool(current_app.config.get("STRICT_STATUS_TRANSITIONS", False))


def _check_transition(current: str, new_status: str, strict: bool):
    if not strict or current == new_status:
        return
    if new_status not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(f"Cannot move appointment from {current} to {new_status}")


def _commit_or_conflict():
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError() from None


def set_status(appointment_id: str, new_status, strict=None):
    """Admin status change. Returns (appointment, previous_status)."""
    if new_status not in APPOINTMENT_STATUSES:
        raise ValidationError(
            "Invalid status",
            details=[{"field": "status", "message": f"Must be one of: {', '.join(APPOINTMENT_STATUSES)}"}],
        )

    row = repository.find_appointment_by_id(appointment_id)
    if not row:
        raise NotFoundError()

    previous = row.status
    _check_transition(previous, new_status, _strict_transitions(strict))

    try:
        row = repository.update_appointment_status(appointment_id, new_status)
    except IntegrityError:
        # re-activating a cancelled appointment whose slot was rebooked
        db.session.rollback()
        raise ConflictError() from None

    logger.info("appointment %s status %s -> %s", appointment_id, previous, new_status)
    return row, previous


def cancel_appointment(appointment_id: str, account):
    row = repository.find_appointment_by_id(appointment_id)
    # not owned reads the same as missing
    if not row or account is None or row.customer_id != account.id:
        raise NotFoundError()

    if row.status not in CUSTOMER_CANCELLABLE:
        raise InvalidTransitionError("Cannot cancel this appointment")

    row = repository.update_appointment_status(appointment_id, "cancelled")
    logger.info("appointment %s cancelled by customer %s", appointment_id, account.id)
    return row


def update_appointment(appointment_id: str, payload, strict=None):
    """Admin edit of descriptive fields.

    No future-date rule and no availability lookup; the time must still be
    a slot of the target weekday and the active-slot index still rejects
    a double booking.
    """
    data = parse_payload(AppointmentUpdate, payload)
    changes = data.model_dump(exclude_unset=True)

    row = repository.find_appointment_by_id(appointment_id)
    if not row:
        raise NotFoundError()

    cleared = [f for f in _NOT_NULL_FIELDS if f in changes and changes[f] is None]
    if cleared:
        raise ValidationError(details=[{"field": f, "message": "Cannot be empty"} for f in cleared])

    if "appointment_date" in changes or "appointment_time" in changes:
        day = changes.get("appointment_date", row.appointment_date)
        minutes = changes.get("appointment_time", row.start_minutes)
        if minutes not in slots_for(day):
            raise ValidationError(details=[{"field": "appointment_time", "message": "Time is not a bookable slot for this day"}])

    if "status" in changes:
        _check_transition(row.status, changes["status"], _strict_transitions(strict))

    if "appointment_time" in changes:
        changes["start_minutes"] = changes.pop("appointment_time")
    if "email" in changes:
        changes["email"] = str(changes["email"])

    for field, value in changes.items():
        setattr(row, field, value)

    _commit_or_conflict()
    logger.info("appointment %s updated: %s", appointment_id, ", ".join(sorted(changes)) or "no changes")
    return row


def delete_appointment(appointment_id: str) -> None:
    if not repository.delete_appointment(appointment_id):
        raise NotFoundError()
    logger.info("appointment %s deleted", appointment_id)
