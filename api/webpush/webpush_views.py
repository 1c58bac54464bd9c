from flask import Blueprint, jsonify, request

from api.webpush.webpush_service import (
    process_due_schedules,
    schedule_notification,
    send_now,
    subscribe,
    unsubscribe,
)
from common.auth import require_admin_or_secret, require_secret
from common.exceptions import Code404BaseException
from common.log import get_logger
from common.utils.webpush import get_vapid_public_key

logger = get_logger(__name__)

bp_name = 'api-webpush'
bp_url_prefix = '/api/webpush'
bp = Blueprint(bp_name, __name__, url_prefix=bp_url_prefix)


def _json_body():
    return request.get_json(silent=True) or {}


@bp.route("/public-key", methods=["GET"])
def public_key():
    key = get_vapid_public_key()
    if not key:
        return jsonify({"error": "VAPID public key not configured"}), 500
    return jsonify({"publicKey": key})


@bp.route("/subscribe", methods=["POST"])
def subscribe_api():
    try:
        return jsonify(subscribe(_json_body()))
    except Code404BaseException as e:
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        logger.exception("Error saving push subscription")
        return jsonify({"error": "Failed to save subscription"}), 500


@bp.route("/unsubscribe", methods=["POST"])
def unsubscribe_api():
    try:
        return jsonify(unsubscribe(_json_body()))
    except Code404BaseException as e:
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        logger.exception("Error removing push subscription")
        return jsonify({"error": "Failed to remove subscription"}), 500


@bp.route("/send", methods=["POST"])
@require_admin_or_secret()
def send_api():
    try:
        return jsonify(send_now(_json_body()))
    except Exception:
        logger.exception("Error sending push notifications")
        return jsonify({"error": "Failed to send notifications"}), 500


@bp.route("/schedule", methods=["POST"])
@require_admin_or_secret()
def schedule_api():
    try:
        return jsonify(schedule_notification(_json_body()))
    except Code404BaseException as e:
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        logger.exception("Error scheduling push notification")
        return jsonify({"error": "Failed to schedule notification"}), 500


@bp.route("/process-schedules", methods=["POST"])
@require_secret
def process_schedules_api():
    try:
        return jsonify(process_due_schedules())
    except Exception:
        logger.exception("Error processing push schedules")
        return jsonify({"error": "Failed to process schedules"}), 500
