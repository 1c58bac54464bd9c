from flask import Blueprint, jsonify
from werkzeug.exceptions import HTTPException

from common.exceptions import Code404BaseException
from common.log import get_logger

logger = get_logger("exception_views")
bp = Blueprint('exception_views', __name__)


@bp.app_errorhandler(Code404BaseException)
def handle_app_exception(e):
    logger.warning("Unhandled %s: %s", type(e).__name__, e.message)
    return jsonify({"ok": False, "message": e.message}), e.status_code


@bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    return jsonify({"ok": False, "message": e.description}), e.code


@bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logger.exception("Unhandled exception")
    return jsonify({"ok": False, "message": "Internal server error"}), 500
