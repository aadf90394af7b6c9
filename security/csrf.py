import secrets
from flask import request, g, current_app

from scheduling.errors import ForbiddenError

UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

# Entry points that run before a session exists
EXEMPT_PATHS = frozenset({"/auth/login", "/auth/register", "/health"})


def _cookie_name() -> str:
    return current_app.config.get("CSRF_COOKIE_NAME", "csrf_token")


def _header_name() -> str:
    return current_app.config.get("CSRF_HEADER_NAME", "X-CSRF-Token")


def issue_csrf_token(resp):
    """Set a fresh double-submit token; the SPA echoes it back in a header."""
    resp.set_cookie(
        _cookie_name(),
        secrets.token_urlsafe(32),
        httponly=False,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
        path="/",
    )
    return resp


def clear_csrf_token(resp):
    resp.delete_cookie(_cookie_name(), path="/")
    return resp


def tokens_match() -> bool:
    cookie_token = request.cookies.get(_cookie_name())
    header_token = request.headers.get(_header_name())
    if not cookie_token or not header_token:
        return False
    return secrets.compare_digest(cookie_token, header_token)


def csrf_protect():
    """before_request hook for state-changing calls made with a session.

    Anonymous bookings carry no session cookie to ride on, so only
    authenticated callers must present the token.
    """
    if request.method not in UNSAFE_METHODS or request.path in EXEMPT_PATHS:
        return
    if getattr(g, "user", None) is None:
        return
    if not tokens_match():
        raise ForbiddenError("CSRF validation failed")
