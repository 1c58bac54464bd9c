from flask import Blueprint, Response, jsonify, request

from api.hackathon.hackathon_service import (
    export_registrations_csv,
    import_registrations_csv,
    list_registrations,
    register,
    send_confirmation,
)
from common.auth import require_admin_code, require_admin_or_secret
from common.exceptions import Code404BaseException
from common.log import get_logger
from db.db import now, serialize_value
from services.hackathon_notifications import (
    clear_hackathon_notifications,
    list_hackathon_notifications,
    schedule_hackathon_notifications,
)

logger = get_logger(__name__)

bp_name = 'api-hackathon'
bp_url_prefix = '/api/hackathon'
bp = Blueprint(bp_name, __name__, url_prefix=bp_url_prefix)


def _is_dry_run(body):
    return request.args.get("dryRun", "").lower() == "true" or bool(body.get("dryRun"))


@bp.route("/schedule-notifications", methods=["POST"])
@require_admin_or_secret("admin", "mentor")
def schedule_notifications_api():
    body = request.get_json(silent=True) or {}
    try:
        return jsonify(schedule_hackathon_notifications(dry_run=_is_dry_run(body)))
    except Exception:
        logger.exception("Error scheduling hackathon notifications")
        return jsonify({"error": "Failed to schedule notifications"}), 500


@bp.route("/schedule-notifications", methods=["GET"])
@require_admin_or_secret("admin", "mentor")
def list_notifications_api():
    try:
        notifications = list_hackathon_notifications()
        return jsonify({"ok": True, "total": len(notifications), "notifications": serialize_value(notifications)})
    except Exception:
        logger.exception("Error listing hackathon notifications")
        return jsonify({"error": "Failed to fetch notifications"}), 500


@bp.route("/schedule-notifications", methods=["DELETE"])
@require_admin_or_secret("admin", "mentor")
def clear_notifications_api():
    try:
        deleted = clear_hackathon_notifications()
        return jsonify({"ok": True, "deleted": deleted, "message": f"Deleted {deleted} pending notifications"})
    except Exception:
        logger.exception("Error clearing hackathon notifications")
        return jsonify({"error": "Failed to clear notifications"}), 500


@bp.route("/register", methods=["POST"])
def register_api():
    try:
        result = register(request.get_json(silent=True) or {})
        return jsonify({"success": True, "message": "Registration successful", **result}), 201
    except Code404BaseException as e:
        return jsonify({"success": False, "error": e.message}), e.status_code
    except Exception:
        logger.exception("Error storing hackathon registration")
        return jsonify({"success": False, "error": "Registration failed"}), 500


@bp.route("/send-confirmation", methods=["POST"])
def send_confirmation_api():
    try:
        result = send_confirmation(request.get_json(silent=True) or {})
    except Code404BaseException as e:
        return jsonify({"success": False, "error": e.message}), e.status_code
    except Exception:
        logger.exception("Error sending hackathon confirmation")
        return jsonify({"success": False, "error": "Internal server error"}), 500

    if not result["success"]:
        return jsonify({"success": False, "error": result.get("error") or "Failed to send confirmation email"}), 500
    return jsonify({
        "success": True,
        "message": "Confirmation email sent successfully",
        "messageId": result.get("messageId"),
    })


@bp.route("/registrations", methods=["GET"])
@require_admin_code
def registrations_api():
    try:
        registrations = list_registrations()
        return jsonify({"ok": True, "total": len(registrations), "data": serialize_value(registrations)})
    except Exception:
        logger.exception("Error fetching hackathon registrations")
        return jsonify({"ok": False, "message": "Failed to fetch registrations"}), 500


@bp.route("/registrations/export", methods=["GET"])
@require_admin_code
def export_registrations_api():
    try:
        body = export_registrations_csv()
    except Exception:
        logger.exception("Error exporting hackathon registrations")
        return jsonify({"ok": False, "message": "Failed to export registrations"}), 500

    filename = f"hackathon_registrations_{now().strftime('%Y%m%dT%H%M%SZ')}.csv"
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@bp.route("/registrations/import", methods=["POST"])
@require_admin_code
def import_registrations_api():
    try:
        imported = import_registrations_csv(request.get_data(as_text=True))
        return jsonify({"ok": True, "imported": imported, "message": f"Imported {imported} registrations successfully!"})
    except Code404BaseException as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except Exception:
        logger.exception("Error importing hackathon registrations")
        return jsonify({"ok": False, "message": "Failed to import registrations"}), 500
