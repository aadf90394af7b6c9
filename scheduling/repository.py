from datetime import date

from models import db
from models.appointment import Appointment


def find_appointments_by_date(day: date) -> list[Appointment]:
    """Appointments on ``day`` that still hold their slot."""
    q = Appointment.query.filter(Appointment.appointment_date == day)
    q = q.filter(Appointment.status != "cancelled")
    return q.order_by(Appointment.start_minutes.asc()).all()


def find_appointment_by_id(appointment_id: str):
    return db.session.get(Appointment, appointment_id)


def insert_appointment(record: Appointment) -> Appointment:
    # IntegrityError from the active-slot index propagates to the caller
    db.session.add(record)
    db.session.commit()
    return record


def update_appointment_status(appointment_id: str, status: str):
    row = find_appointment_by_id(appointment_id)
    if not row:
        return None
    row.status = status
    db.session.commit()
    return row


def delete_appointment(appointment_id: str) -> bool:
    row = find_appointment_by_id(appointment_id)
    if not row:
        return False
    db.session.delete(row)
    db.session.commit()
    return True
