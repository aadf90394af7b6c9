from datetime import datetime
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True, index=True)  # None for anonymous bookings
    actor_role = db.Column(db.String(20), nullable=True)  # ADMIN, CUSTOMER or None
    action = db.Column(db.String(80), nullable=False)  # e.g. APPOINTMENT_CREATE, LOGIN_FAIL
    entity = db.Column(db.String(40), nullable=True)   # e.g. appointment, user
    entity_id = db.Column(db.String(64), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # appointment history lookups; rows outlive deleted appointments
        db.Index("ix_audit_logs_entity", "entity", "entity_id"),
    )
