import json
import os
from functools import wraps
from urllib.parse import unquote

from flask import jsonify, request

from common.log import get_logger, warning

logger = get_logger("auth")

USER_COOKIE = "code404-user"
SECRET_HEADER = "x-webpush-secret"
COOKIE_MAX_AGE = 60 * 60 * 24 * 30


def get_cookie_user(req):
    """
    The logged-in user as stored by the frontend in the code404-user cookie
    (URL-encoded JSON). This is a convenience check, not a security boundary.
    """
    raw = req.cookies.get(USER_COOKIE)
    if not raw:
        return None
    try:
        user = json.loads(unquote(raw))
    except (ValueError, TypeError):
        return None
    return user if isinstance(user, dict) else None


def has_role(req, *roles):
    user = get_cookie_user(req)
    return user is not None and user.get("role") in roles


def has_webpush_secret(req):
    expected = os.environ.get("WEBPUSH_SEND_SECRET")
    if not expected:
        return False
    return req.headers.get(SECRET_HEADER, "") == expected


def _unauthorized():
    warning(logger, "Rejected unauthorized request", path=request.path)
    return jsonify({"error": "Unauthorized"}), 401


def require_roles(*roles):
    """Cookie user must carry one of the given roles"""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not has_role(request, *roles):
                return _unauthorized()
            return f(*args, **kwargs)
        return wrapper
    return decorator


def require_admin_or_secret(*roles):
    """Cookie user with one of the roles (admin by default) or the shared secret header"""
    allowed = roles or ("admin",)

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not (has_role(request, *allowed) or has_webpush_secret(request)):
                return _unauthorized()
            return f(*args, **kwargs)
        return wrapper
    return decorator


def require_secret(f):
    """Shared secret header only; used by cron callers"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not has_webpush_secret(request):
            return _unauthorized()
        return f(*args, **kwargs)
    return wrapper


require_admin = require_roles("admin")


ADMIN_CODE_HEADER = "x-admin-code"


def has_admin_code(req):
    expected = os.environ.get("HACKATHON_ADMIN_CODE")
    if not expected:
        return False
    return req.headers.get(ADMIN_CODE_HEADER, "") == expected


def require_admin_code(f):
    """Hackathon organizer access: the shared admin code header, or an admin cookie"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not (has_admin_code(request) or has_role(request, "admin")):
            return _unauthorized()
        return f(*args, **kwargs)
    return wrapper
