import uuid
from datetime import datetime
from sqlalchemy import text
from models.db import db

APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled", "no_show")

def _new_id() -> str:
    return str(uuid.uuid4())

class Appointment(db.Model):
    __tablename__ = "appointments"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    # contact snapshot, independent of the linked account's profile
    customer_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=False)

    vehicle_year = db.Column(db.Integer, nullable=True)
    vehicle_make = db.Column(db.String(50), nullable=True)
    vehicle_model = db.Column(db.String(50), nullable=True)

    service_type = db.Column(db.String(100), nullable=False)

    appointment_date = db.Column(db.Date, nullable=False, index=True)
    start_minutes = db.Column(db.Integer, nullable=False)  # minutes since midnight
    duration = db.Column(db.Integer, nullable=False, default=60)
    notes = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    # status values: pending, confirmed, completed, cancelled, no_show

    customer_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    customer = db.relationship("User", back_populates="appointments")

    __table_args__ = (
        # Hard business-rule: one active appointment per date and start time
        db.Index(
            "uq_appointment_active_slot",
            "appointment_date",
            "start_minutes",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
        db.CheckConstraint("duration BETWEEN 30 AND 240", name="ck_appointment_duration"),
    )
