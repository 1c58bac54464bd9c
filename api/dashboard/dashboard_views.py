from flask import Blueprint, jsonify, request

from api.dashboard.dashboard_service import get_dashboard
from common.log import get_logger
from db.db import serialize_value

logger = get_logger(__name__)
bp = Blueprint('dashboard', __name__, url_prefix='/api')


@bp.route("/dashboard", methods=["GET"])
def dashboard():
    try:
        return jsonify({"ok": True, "data": serialize_value(get_dashboard(request.args.get("userId")))})
    except Exception:
        logger.exception("Error building dashboard")
        return jsonify({"ok": False, "message": "Failed to load dashboard"}), 500
