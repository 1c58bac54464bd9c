from flask import Blueprint, jsonify, request

from api.members.members_service import (
    admin_decision,
    create_join_request,
    decide_pending_member,
    get_profile,
    list_members,
    list_pending_members,
    prune_members,
    regenerate_all_credentials,
    update_credentials,
    update_profile,
    upsert_member,
)
from common.auth import get_cookie_user, require_admin
from common.exceptions import Code404BaseException
from common.log import get_logger
from db.db import serialize_value

logger = get_logger(__name__)
bp = Blueprint('members', __name__, url_prefix='/api')


def _json_body():
    return request.get_json(silent=True) or {}


def _success_response(data=None, message=None, status_code=200):
    response = {"ok": True}
    if message:
        response["message"] = message
    if data is not None:
        response["data"] = serialize_value(data)
    return jsonify(response), status_code


def _error_response(message, status_code=400):
    return jsonify({"ok": False, "message": message}), status_code


def _admin_id(body):
    user = get_cookie_user(request) or {}
    return body.get("adminId") or user.get("id")


@bp.route("/members", methods=["GET"])
def get_members():
    try:
        return _success_response(list_members())
    except Exception:
        logger.exception("Error fetching members")
        return _error_response("Failed to fetch members", 500)


@bp.route("/members", methods=["POST"])
def save_member():
    body = _json_body()
    try:
        member = upsert_member(body)
        return _success_response(member, status_code=200 if body.get("id") else 201)
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error saving member")
        return _error_response("Failed to save member", 500)


@bp.route("/profile", methods=["GET"])
def get_profile_api():
    try:
        return _success_response(get_profile(request.args.get("userId")))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error fetching profile")
        return _error_response("Failed to fetch profile", 500)


@bp.route("/profile", methods=["PATCH"])
def update_profile_api():
    try:
        return _success_response(update_profile(_json_body()), message="Profile updated")
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error updating profile")
        return _error_response("Failed to update profile", 500)


@bp.route("/members/credentials", methods=["PATCH"])
def update_credentials_api():
    try:
        return jsonify(update_credentials(_json_body()))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error updating credentials")
        return _error_response("Failed to update credentials", 500)


@bp.route("/admin/regenerate-credentials", methods=["POST"])
@require_admin
def regenerate_credentials_api():
    body = _json_body()
    try:
        return jsonify(regenerate_all_credentials(send_emails=body.get("sendEmails", True)))
    except Exception:
        logger.exception("Error regenerating credentials")
        return _error_response("Failed to regenerate credentials", 500)


@bp.route("/admin/prune-members", methods=["POST"])
@require_admin
def prune_members_api():
    body = _json_body()
    try:
        return jsonify(prune_members(
            body.get("whitelist") or [],
            send_emails=body.get("sendEmails", True),
            dry_run=bool(body.get("dryRun", False)),
        ))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error pruning members")
        return _error_response("Failed to prune members", 500)


@bp.route("/pending-members", methods=["POST"])
def join_request_api():
    try:
        return _success_response(create_join_request(_json_body()), message="Request received", status_code=201)
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error storing join request")
        return _error_response("Failed to submit join request", 500)


@bp.route("/pending-members", methods=["GET"])
@require_admin
def get_pending_members():
    try:
        return _success_response(list_pending_members())
    except Exception:
        logger.exception("Error fetching pending members")
        return _error_response("Failed to fetch pending members", 500)


@bp.route("/pending-members", methods=["PATCH"])
@require_admin
def decide_pending_member_api():
    body = _json_body()
    try:
        result = decide_pending_member(body.get("memberId"), body.get("decision"), _admin_id(body))
        return jsonify(serialize_value(result))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error processing member decision")
        return _error_response("Failed to process decision", 500)


@bp.route("/admin/decision", methods=["POST"])
@require_admin
def admin_decision_api():
    body = _json_body()
    try:
        return jsonify(serialize_value(admin_decision(body.get("id"), body.get("decision"), _admin_id(body))))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error processing admin decision")
        return _error_response("Failed to process decision", 500)
