from flask import Blueprint, request, jsonify, g

from models import db
from models.user import User, Role
from security.password import hash_password, verify_password, validate_password
from security.session import (
    cookie_name,
    create_session,
    revoke_session,
    revoke_all_sessions,
    set_session_cookie,
)
from security.csrf import issue_csrf_token, clear_csrf_token
from utils.audit import log_event
from utils.auth_context import login_required
from utils.serialize import user_json


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def _clean_optional(value, max_len: int):
    """Returns (ok, cleaned) for an optional profile string."""
    if value is None:
        return True, None
    if not isinstance(value, str) or len(value.strip()) > max_len:
        return False, None
    return True, value.strip() or None


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400
    valid, errors = validate_password(password)
    if not valid:
        return jsonify(error="Password does not meet policy", details=errors), 400

    ok_name, full_name = _clean_optional(data.get("full_name"), 100)
    ok_phone, phone_number = _clean_optional(data.get("phone_number"), 20)
    if not ok_name or not ok_phone:
        return jsonify(error="Invalid full_name or phone_number"), 400

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered"), 409

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        phone_number=phone_number,
    )
    db.session.add(user)
    db.session.flush()

    customer_role = Role.query.filter_by(name="CUSTOMER").first()
    if customer_role:
        user.roles.append(customer_role)

    db.session.commit()
    log_event("REGISTER_SUCCESS", user_id=user.id)

    return jsonify(message="Registered successfully", id=user.id), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid credentials"), 401

    if not user.is_active:
        log_event("LOGIN_FAIL_INACTIVE", user_id=user.id)
        return jsonify(error="Account is disabled"), 403

    # Rotate: revoke any existing sessions for this user
    revoked_count = revoke_all_sessions(user.id)
    raw_token = create_session(user.id)

    resp = jsonify(message="Login OK", user=user_json(user))
    set_session_cookie(resp, raw_token)
    issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked_count})
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(user_json(g.user)), 200


@auth_bp.post("/logout")
@login_required
def logout():
    revoke_session(request.cookies.get(cookie_name()))
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name(), path="/")
    clear_csrf_token(resp)
    return resp, 200


@auth_bp.get("/profile")
@login_required
def get_profile():
    return jsonify(
        full_name=g.user.full_name,
        phone_number=g.user.phone_number,
        email=g.user.email,
    ), 200


@auth_bp.post("/profile")
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}

    if "full_name" in data:
        ok, value = _clean_optional(data.get("full_name"), 100)
        if not ok:
            return jsonify(error="Invalid full_name"), 400
        g.user.full_name = value

    if "phone_number" in data:
        ok, value = _clean_optional(data.get("phone_number"), 20)
        if not ok:
            return jsonify(error="Invalid phone_number"), 400
        g.user.phone_number = value

    db.session.commit()
    log_event("PROFILE_UPDATE", user_id=g.user.id)
    return jsonify(message="Profile updated", user=user_json(g.user)), 200
