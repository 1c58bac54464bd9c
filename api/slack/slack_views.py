from flask import Blueprint, jsonify, request

from api.slack.slack_service import notify
from common.auth import require_admin
from common.exceptions import ValidationError
from common.log import get_logger

logger = get_logger("slack_views")
bp = Blueprint('slack', __name__, url_prefix='/api')


@bp.route("/slack/notify", methods=["POST"])
@require_admin
def slack_notify():
    try:
        result = notify(request.get_json(silent=True) or {})
        return jsonify(result), 200 if result["ok"] else 502
    except ValidationError as e:
        logger.warning("ValidationError: %s", str(e))
        return jsonify({"ok": False, "error": e.message}), 400
    except Exception:
        logger.exception("Error sending Slack announcement")
        return jsonify({"ok": False, "error": "An unexpected error occurred"}), 500
