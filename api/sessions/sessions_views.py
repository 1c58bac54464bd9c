from flask import Blueprint, jsonify, request

from api.sessions.sessions_service import (
    archive_session,
    create_session,
    delete_session,
    list_all_sessions,
    list_upcoming_sessions,
    update_session,
)
from common.auth import get_cookie_user, require_roles
from common.exceptions import Code404BaseException
from common.log import get_logger
from db.db import serialize_value

logger = get_logger(__name__)

bp_name = 'api-sessions'
bp_url_prefix = '/api/sessions'
bp = Blueprint(bp_name, __name__, url_prefix=bp_url_prefix)

require_organizer = require_roles("admin", "mentor")


def _error_response(message, status_code=400):
    return jsonify({"ok": False, "message": message}), status_code


@bp.route("", methods=["GET"])
def get_sessions():
    try:
        return jsonify({"ok": True, "data": serialize_value(list_upcoming_sessions())})
    except Exception:
        logger.exception("Error fetching sessions")
        return _error_response("Failed to fetch sessions", 500)


@bp.route("/all", methods=["GET"])
@require_organizer
def get_all_sessions():
    try:
        return jsonify({"ok": True, "data": serialize_value(list_all_sessions())})
    except Exception:
        logger.exception("Error fetching sessions")
        return _error_response("Failed to fetch sessions", 500)


@bp.route("", methods=["POST"])
@require_organizer
def create_session_api():
    user = get_cookie_user(request) or {}
    try:
        session = create_session(request.get_json(silent=True) or {}, created_by=user.get("id"))
        return jsonify({"ok": True, "data": serialize_value(session)}), 201
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error creating session")
        return _error_response("Failed to create session", 500)


@bp.route("/<session_id>", methods=["PUT"])
@require_organizer
def update_session_api(session_id):
    try:
        session = update_session(session_id, request.get_json(silent=True) or {})
        return jsonify({"ok": True, "data": serialize_value(session)})
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error updating session")
        return _error_response("Failed to update session", 500)


@bp.route("/<session_id>", methods=["DELETE"])
@require_organizer
def delete_session_api(session_id):
    try:
        delete_session(session_id)
        return jsonify({"ok": True, "message": "Session deleted"})
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error deleting session")
        return _error_response("Failed to delete session", 500)


@bp.route("/<session_id>/archive", methods=["POST"])
@require_organizer
def archive_session_api(session_id):
    try:
        return jsonify({"ok": True, "data": serialize_value(archive_session(session_id))})
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error archiving session")
        return _error_response("Failed to archive session", 500)
