import logging
from datetime import date

from sqlalchemy.exc import IntegrityError

from models import db
from models.appointment import Appointment
from scheduling.availability import get_available_slots
from scheduling.errors import ConflictError
from scheduling.repository import insert_appointment
from scheduling.schemas import AppointmentCreate, parse_payload
from scheduling.slots import format_slot

logger = logging.getLogger(__name__)

# account attribute -> (snake_case key, camelCase key) in the request body
_PREFILL = {
    "full_name": ("customer_name", "customerName"),
    "email": ("email", "email"),
    "phone_number": ("phone", "phone"),
}


def _prefill_from_account(payload: dict, account) -> dict:
    merged = dict(payload)
    for attr, keys in _PREFILL.items():
        if any(merged.get(k) not in (None, "") for k in keys):
            continue
        value = getattr(account, attr, None)
        if value:
            merged[keys[0]] = value
    return merged


def create_appointment(payload, account=None, today: date = None) -> Appointment:
    """Validate a booking request and insert it as a pending appointment.

    Raises ValidationError with every failing field, or ConflictError when
    the slot was taken between the availability lookup and the insert.
    """
    if account is not None and isinstance(payload, dict):
        payload = _prefill_from_account(payload, account)

    data = parse_payload(AppointmentCreate, payload, today=today or date.today())

    day = data.appointment_date
    minutes = data.appointment_time
    if minutes not in get_available_slots(day):
        logger.info("slot %s %s already taken", day.isoformat(), format_slot(minutes))
        raise ConflictError()

    row = Appointment(
        customer_name=data.customer_name,
        email=str(data.email),
        phone=data.phone,
        vehicle_year=data.vehicle_year,
        vehicle_make=data.vehicle_make,
        vehicle_model=data.vehicle_model,
        service_type=data.service_type,
        appointment_date=day,
        start_minutes=minutes,
        duration=data.duration,
        notes=data.notes,
        status="pending",
        customer_id=account.id if account is not None else None,
    )

    try:
        insert_appointment(row)
    except IntegrityError:
        db.session.rollback()
        # uq_appointment_active_slot: a concurrent booking won the race
        logger.warning("double booking prevented for %s %s", day.isoformat(), format_slot(minutes))
        raise ConflictError() from None

    logger.info("appointment %s booked for %s %s", row.id, day.isoformat(), format_slot(minutes))
    return row
