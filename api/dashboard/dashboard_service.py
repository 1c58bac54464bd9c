from datetime import date

from api.sessions.sessions_service import list_upcoming_sessions
from common.log import get_logger, debug
from db.db import doc_to_dict, get_db

logger = get_logger("dashboard_service")

UPCOMING_SESSION_LIMIT = 3


def get_user_projects(user_id):
    """Projects the user owns or has joined, without duplicates"""
    db = get_db()
    projects = {}
    for doc in db.collection("projects").where("ownerId", "==", user_id).stream():
        projects[doc.id] = doc_to_dict(doc)

    member_project_ids = {
        (doc.to_dict() or {}).get("projectId")
        for doc in db.collection("projectMembers").where("userId", "==", user_id).stream()
    }
    for project_id in member_project_ids - set(projects):
        if not project_id:
            continue
        doc = db.collection("projects").document(project_id).get()
        if doc.exists:
            projects[doc.id] = doc_to_dict(doc)
    return list(projects.values())


def get_dashboard(user_id=None, today=None):
    upcoming = list_upcoming_sessions(today or date.today())
    projects = get_user_projects(user_id) if user_id else []
    debug(logger, "Built dashboard", user_id=user_id, projects=len(projects), sessions=len(upcoming))
    return {
        "stats": {
            "activeProjects": len([p for p in projects if p.get("status") != "completed"]),
            "upcomingSessions": len(upcoming),
        },
        "projects": projects,
        "upcomingSessions": upcoming[:UPCOMING_SESSION_LIMIT],
    }
