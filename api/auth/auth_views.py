import json
from urllib.parse import quote

from flask import Blueprint, jsonify, request

from api.members.members_service import authenticate
from common.auth import COOKIE_MAX_AGE, USER_COOKIE
from common.log import get_logger, info
from db.db import serialize_value

logger = get_logger(__name__)
bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@bp.route("/login", methods=["POST"])
def login():
    body = request.get_json(silent=True) or {}
    username = body.get("username")
    password = body.get("password")
    if not username or not password:
        return jsonify({"ok": False, "message": "Username and password are required"}), 400

    try:
        user = authenticate(username, password)
    except Exception:
        logger.exception("Error during login")
        return jsonify({"ok": False, "message": "Login failed"}), 500

    if user is None:
        return jsonify({"ok": False, "message": "Invalid username or password"}), 401

    user = serialize_value(user)
    response = jsonify({"ok": True, "message": "Login successful", "user": user})
    response.set_cookie(
        USER_COOKIE,
        quote(json.dumps(user)),
        max_age=COOKIE_MAX_AGE,
        samesite="Lax",
        path="/",
    )
    info(logger, "Member logged in", member_id=user.get("id"))
    return response


@bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"ok": True})
    response.delete_cookie(USER_COOKIE, path="/")
    return response
