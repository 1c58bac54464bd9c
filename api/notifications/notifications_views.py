from flask import Blueprint, jsonify, request

from api.notifications.notifications_service import list_notifications, mark_read
from common.exceptions import Code404BaseException
from common.log import get_logger
from db.db import serialize_value

logger = get_logger(__name__)
bp = Blueprint('notifications', __name__, url_prefix='/api')


@bp.route("/notifications", methods=["GET"])
def get_notifications():
    try:
        result = list_notifications(request.args.get("userId"), request.args.get("limit", 20))
        return jsonify({"ok": True, **serialize_value(result)})
    except Code404BaseException as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except Exception:
        logger.exception("Error fetching notifications")
        return jsonify({"ok": False, "message": "Failed to fetch notifications"}), 500


@bp.route("/notifications", methods=["PATCH"])
def update_notifications():
    body = request.get_json(silent=True) or {}
    try:
        updated = mark_read(
            body.get("userId"),
            notification_ids=body.get("notificationIds"),
            mark_all=bool(body.get("markAllAsRead")),
        )
        return jsonify({"ok": True, "updated": updated})
    except Code404BaseException as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except Exception:
        logger.exception("Error updating notifications")
        return jsonify({"ok": False, "message": "Failed to update notifications"}), 500
