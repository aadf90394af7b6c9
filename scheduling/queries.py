import math
from datetime import date

from models.appointment import Appointment, APPOINTMENT_STATUSES
from scheduling.errors import NotFoundError, ValidationError
from scheduling.repository import find_appointment_by_id

ACTIVE_STATUSES = ("pending", "confirmed")


def _check_status_filter(status):
    if status and status not in APPOINTMENT_STATUSES:
        raise ValidationError(
            "Invalid status filter",
            details=[{"field": "status", "message": f"Must be one of: {', '.join(APPOINTMENT_STATUSES)}"}],
        )


def list_appointments(status=None, day: date = None, page: int = 1, limit: int = 20):
    """Admin listing ordered by date then start time. Returns (rows, pagination)."""
    _check_status_filter(status)

    q = Appointment.query
    if status:
        q = q.filter(Appointment.status == status)
    if day:
        q = q.filter(Appointment.appointment_date == day)

    total = q.count()
    rows = (
        q.order_by(Appointment.appointment_date.asc(), Appointment.start_minutes.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
    return rows, pagination


def get_appointment(appointment_id: str) -> Appointment:
    row = find_appointment_by_id(appointment_id)
    if not row:
        raise NotFoundError()
    return row


def appointment_stats(today: date = None) -> dict:
    today = today or date.today()
    q = Appointment.query
    return {
        "total_appointments": q.count(),
        "pending_appointments": q.filter(Appointment.status == "pending").count(),
        "confirmed_appointments": q.filter(Appointment.status == "confirmed").count(),
        "today_appointments": q.filter(Appointment.appointment_date == today).count(),
        "upcoming_appointments": q.filter(
            Appointment.appointment_date >= today,
            Appointment.status.in_(ACTIVE_STATUSES),
        ).count(),
    }


def list_customer_appointments(customer_id: int, status=None, upcoming: bool = False, today: date = None):
    _check_status_filter(status)

    q = Appointment.query.filter(Appointment.customer_id == customer_id)
    if status:
        q = q.filter(Appointment.status == status)
    if upcoming:
        q = q.filter(Appointment.appointment_date >= (today or date.today()))

    return q.order_by(Appointment.appointment_date.desc(), Appointment.start_minutes.desc()).all()


def get_customer_appointment(customer_id: int, appointment_id: str) -> Appointment:
    row = find_appointment_by_id(appointment_id)
    if not row or row.customer_id != customer_id:
        raise NotFoundError()
    return row
