from flask import Blueprint, jsonify, request

from api.events.events_service import create_event, list_events, rsvp
from common.auth import get_cookie_user, require_admin
from common.exceptions import Code404BaseException
from common.log import get_logger
from db.db import serialize_value

logger = get_logger(__name__)
bp = Blueprint('events', __name__, url_prefix='/api')


@bp.route("/events", methods=["GET"])
def get_events():
    try:
        return jsonify({"ok": True, "data": serialize_value(list_events())})
    except Exception:
        logger.exception("Error fetching events")
        return jsonify({"ok": False, "message": "Failed to fetch events"}), 500


@bp.route("/events", methods=["POST"])
@require_admin
def create_event_api():
    user = get_cookie_user(request) or {}
    try:
        event = create_event(request.get_json(silent=True) or {}, created_by=user.get("id"))
        return jsonify({"ok": True, "data": serialize_value(event)}), 201
    except Code404BaseException as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except Exception:
        logger.exception("Error creating event")
        return jsonify({"ok": False, "message": "Failed to create event"}), 500


@bp.route("/event-rsvp", methods=["POST"])
def event_rsvp():
    body = request.get_json(silent=True) or {}
    try:
        rsvp_id = rsvp(body.get("eventId"), body.get("userId"))
        return jsonify({"ok": True, "message": "RSVP confirmed.", "id": rsvp_id})
    except Code404BaseException as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except Exception:
        logger.exception("Error saving RSVP")
        return jsonify({"ok": False, "message": "Unable to RSVP."}), 500
