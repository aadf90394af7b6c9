from functools import wraps
from flask import g, jsonify

def has_role(role_name: str, user=None) -> bool:
    user = user if user is not None else getattr(g, "user", None)
    if not user:
        return False
    return role_name in user.role_names

def require_roles(*role_names: str):
    """
    Usage: @require_roles("ADMIN")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(error="Authentication required"), 401

            if not user.role_names.intersection(role_names):
                return jsonify(error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator

admin_required = require_roles("ADMIN")
customer_required = require_roles("CUSTOMER")
