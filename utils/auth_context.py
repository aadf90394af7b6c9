from functools import wraps
from flask import g, jsonify
from security.rbac import has_role
from security.session import get_session_from_request

def load_current_user():
    g.user = None
    g.session = None
    sess = get_session_from_request()
    if not sess or not sess.user.is_active:
        return
    g.session = sess
    g.user = sess.user

def current_customer():
    """The logged-in account when it holds the CUSTOMER role, else None.

    Public endpoints use this to link a booking to an account without
    requiring a login.
    """
    user = getattr(g, "user", None)
    if user is None or not has_role("CUSTOMER", user):
        return None
    return user

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper
