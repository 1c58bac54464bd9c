from flask import Blueprint, jsonify, request

from api.projects.projects_service import (
    create_interest,
    create_project,
    decide_interest,
    delete_interest,
    get_project,
    get_project_detail,
    list_interests,
    list_project_members,
    list_projects,
    remove_project_member,
    update_project,
)
from common.exceptions import Code404BaseException
from common.log import get_logger
from db.db import serialize_value

logger = get_logger(__name__)
bp = Blueprint('projects', __name__, url_prefix='/api')


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


@bp.route("/projects", methods=["GET"])
def get_projects():
    try:
        return _success_response(list_projects())
    except Exception:
        logger.exception("Error fetching projects")
        return _error_response("Failed to fetch projects", 500)


@bp.route("/projects", methods=["POST"])
def create_project_api():
    try:
        return _success_response(create_project(_json_body()), message="Project created", status_code=201)
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error creating project")
        return _error_response("Failed to create project", 500)


@bp.route("/projects/<project_id>", methods=["GET"])
def get_project_api(project_id):
    try:
        return _success_response(get_project(project_id))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error fetching project")
        return _error_response("Failed to fetch project", 500)


@bp.route("/projects/<project_id>", methods=["PATCH"])
def update_project_api(project_id):
    try:
        return _success_response(update_project(project_id, _json_body()), message="Project updated")
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error updating project")
        return _error_response("Failed to update project", 500)


@bp.route("/projects/<project_id>/detail", methods=["GET"])
def get_project_detail_api(project_id):
    try:
        return _success_response(get_project_detail(project_id))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error loading project detail")
        return _error_response("Failed to load project", 500)


@bp.route("/project-interests", methods=["GET"])
def get_interests():
    try:
        return _success_response(list_interests(request.args.get("projectId"), request.args.get("status")))
    except Exception:
        logger.exception("Error fetching project interests")
        return _error_response("Failed to fetch interests", 500)


@bp.route("/project-interests", methods=["POST"])
def create_interest_api():
    try:
        return _success_response(create_interest(_json_body()), message="Request sent", status_code=201)
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error creating project interest")
        return _error_response("Failed to send request", 500)


@bp.route("/project-interests", methods=["PATCH"])
def decide_interest_api():
    try:
        return jsonify(decide_interest(_json_body()))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error updating project interest")
        return _error_response("Failed to update interest", 500)


@bp.route("/project-interests", methods=["DELETE"])
def delete_interest_api():
    try:
        delete_interest(request.args.get("id"))
        return _success_response(message="Interest deleted")
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error deleting project interest")
        return _error_response("Failed to delete", 500)


@bp.route("/project-members", methods=["GET"])
def get_project_members():
    try:
        return _success_response(list_project_members(request.args.get("projectId")))
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error fetching project members")
        return _error_response("Failed to fetch project members", 500)


@bp.route("/project-members/<project_member_id>", methods=["DELETE"])
def remove_project_member_api(project_member_id):
    try:
        remove_project_member(project_member_id)
        return _success_response(message="Member removed")
    except Code404BaseException as e:
        return _error_response(e.message, e.status_code)
    except Exception:
        logger.exception("Error removing project member")
        return _error_response("Failed to remove member", 500)
