import json
import logging
from flask import request, g
from models import db
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)

def _actor_role(user):
    if user is None:
        return None
    names = {r.name for r in user.roles}
    if "ADMIN" in names:
        return "ADMIN"
    if "CUSTOMER" in names:
        return "CUSTOMER"
    return None

def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    user = getattr(g, "user", None)
    if user_id is None and user is not None:
        user_id = user.id

    row = AuditLog(
        user_id=user_id,
        actor_role=_actor_role(user) if user is not None and user.id == user_id else None,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=request.headers.get("X-Forwarded-For", request.remote_addr),
        user_agent=(request.headers.get("User-Agent") or "")[:255] or None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
    logger.debug("audit %s user=%s %s=%s", action, user_id, entity, entity_id)

def events_for(entity: str, entity_id) -> list[dict]:
    """Audit trail of one record, oldest first."""
    rows = (
        AuditLog.query
        .filter_by(entity=entity, entity_id=str(entity_id))
        .order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
        .all()
    )
    return [
        {
            "action": r.action,
            "user_id": r.user_id,
            "actor_role": r.actor_role,
            "metadata": json.loads(r.metadata_json) if r.metadata_json else None,
            "created_at": r.created_at.isoformat(),
        }
        for r in rows
    ]
