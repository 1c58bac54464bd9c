from common.exceptions import DuplicateEntryError, NotFoundError, ValidationError
from common.log import get_logger, info, warning
from common.utils.slack import send_slack_audit
from common.utils.validators import optional_url, require_choice, require_fields, sanitize_string
from db.db import EPOCH, doc_to_dict, get_db, now, to_datetime
from model.project import INTEREST_STATUSES, PROJECT_STATUSES, Project, filter_updates

logger = get_logger("projects_service")

PROJECTS_COLLECTION = "projects"
INTERESTS_COLLECTION = "projectInterests"
PROJECT_MEMBERS_COLLECTION = "projectMembers"
MEMBERS_COLLECTION = "members"
DECISIONS_COLLECTION = "adminDecisions"

JOIN_POINTS = 10
ACTIVITY_FEED_LIMIT = 5


def list_projects():
    return [doc_to_dict(doc) for doc in get_db().collection(PROJECTS_COLLECTION).stream()]


def create_project(body):
    require_fields(body, "title", "description")
    tech = [t.strip() for t in (body.get("tech") or []) if isinstance(t, str) and t.strip()]
    if not tech:
        raise ValidationError("Add at least one technology")

    project = Project.deserialize({
        "title": sanitize_string(body["title"], max_length=120),
        "description": sanitize_string(body["description"]),
        "tech": tech,
        "status": require_choice(body.get("status") or "recruiting", PROJECT_STATUSES, "status"),
        "owner": sanitize_string(body.get("owner")),
        "ownerId": body.get("ownerId"),
        "githubUrl": optional_url(body.get("githubUrl")),
        "demoUrl": optional_url(body.get("demoUrl")),
        "createdAt": now(),
        "updatedAt": now(),
    })
    db = get_db()
    data = project.serialize()
    data.pop("id")
    _, ref = db.collection(PROJECTS_COLLECTION).add(data)
    project.id = ref.id

    if project.owner_id:
        db.collection(PROJECT_MEMBERS_COLLECTION).add({
            "projectId": ref.id,
            "userId": project.owner_id,
            "userName": project.owner,
            "role": "owner",
            "joinedAt": now(),
            "addedBy": project.owner_id,
        })

    info(logger, "Created project", project_id=ref.id, owner_id=project.owner_id)
    send_slack_audit(action="create_project", message=f"New project: {project.title}", payload={"projectId": ref.id})
    return project.serialize()


def get_project(project_id):
    doc = get_db().collection(PROJECTS_COLLECTION).document(project_id).get()
    if not doc.exists:
        raise NotFoundError("Project", project_id)
    return doc_to_dict(doc)


def update_project(project_id, updates):
    ref = get_db().collection(PROJECTS_COLLECTION).document(project_id)
    if not ref.get().exists:
        raise NotFoundError("Project", project_id)

    allowed = filter_updates(updates or {})
    if "status" in allowed:
        require_choice(allowed["status"], PROJECT_STATUSES, "status")
    for url_field in ("githubUrl", "demoUrl", "docsUrl", "chatUrl"):
        if url_field in allowed:
            allowed[url_field] = optional_url(allowed[url_field])
    allowed["updatedAt"] = now()

    ref.update(allowed)
    info(logger, "Updated project", project_id=project_id, fields=sorted(allowed))
    return {"id": project_id, **allowed}


def build_activity_feed(project, members, requests, limit=ACTIVITY_FEED_LIMIT):
    entries = []
    for member in members:
        entries.append({
            "id": f"member-{member['id']}",
            "title": f"{member.get('userName') or 'New member'} joined the squad",
            "description": f"Role: {member['role']}" if member.get("role") else "New contributor",
            "timestamp": to_datetime(member.get("joinedAt")),
        })
    for request in requests:
        interests = request.get("interests") or []
        entries.append({
            "id": f"request-{request['id']}",
            "title": f"{request.get('userName') or 'Builder'} requested access",
            "description": f"Focus: {', '.join(interests[:2])}" if interests else "Waiting for approval",
            "timestamp": to_datetime(request.get("createdAt")) or to_datetime(request.get("requestedAt")),
        })

    p = Project.deserialize(project)
    entries.append({
        "id": "project-updated",
        "title": "Project shipped" if p.status == "completed" else "Project updated",
        "description": p.latest_update or f"Status changed to {p.status_label()}",
        "timestamp": to_datetime(p.updated_at) or to_datetime(p.created_at),
    })

    entries = [e for e in entries if e["timestamp"] is not None]
    entries.sort(key=lambda e: e["timestamp"], reverse=True)
    return entries[:limit]


def get_project_detail(project_id):
    db = get_db()
    project = get_project(project_id)
    members = [doc_to_dict(doc) for doc in
               db.collection(PROJECT_MEMBERS_COLLECTION).where("projectId", "==", project_id).stream()]
    requests = [doc_to_dict(doc) for doc in
                db.collection(INTERESTS_COLLECTION).where("projectId", "==", project_id).stream()]
    return {
        "project": project,
        "members": members,
        "pendingRequests": requests,
        "activities": build_activity_feed(project, members, requests),
    }


def _lookup(db, collection, doc_id):
    """Document by id, falling back to a stored "id" field; None when absent"""
    if not doc_id:
        return None
    doc = db.collection(collection).document(doc_id).get()
    if doc.exists:
        return doc.to_dict() or {}
    for match in db.collection(collection).where("id", "==", doc_id).limit(1).stream():
        return match.to_dict() or {}
    return None


def list_interests(project_id=None, status=None):
    db = get_db()
    query = db.collection(INTERESTS_COLLECTION)
    if project_id:
        query = query.where("projectId", "==", project_id)
    if status:
        query = query.where("status", "==", status)

    interests = []
    for doc in query.stream():
        d = doc_to_dict(doc)
        project = _lookup(db, PROJECTS_COLLECTION, d.get("projectId")) or {}
        member = _lookup(db, MEMBERS_COLLECTION, d.get("userId")) or {}
        d["projectName"] = project.get("title") or d.get("projectId") or "Unknown Project"
        d["userName"] = member.get("name") or d.get("userId") or "Unknown User"
        d["userEmail"] = member.get("email") or ""
        interests.append(d)
    interests.sort(key=lambda i: to_datetime(i.get("createdAt")) or EPOCH, reverse=True)
    return interests


def create_interest(body):
    require_fields(body, "projectId", "userId")
    db = get_db()
    if _lookup(db, PROJECTS_COLLECTION, body["projectId"]) is None:
        raise NotFoundError("Project", body["projectId"])

    existing = db.collection(INTERESTS_COLLECTION) \
        .where("projectId", "==", body["projectId"]) \
        .where("userId", "==", body["userId"]) \
        .where("status", "==", "pending") \
        .limit(1) \
        .stream()
    if any(True for _ in existing):
        raise DuplicateEntryError("Project interest", f"{body['userId']}/{body['projectId']}")

    interest = {
        "projectId": body["projectId"],
        "userId": body["userId"],
        "userName": sanitize_string(body.get("userName")) or None,
        "message": sanitize_string(body.get("message"), max_length=1000),
        "interests": body.get("interests") or [],
        "status": "pending",
        "createdAt": now(),
    }
    _, ref = db.collection(INTERESTS_COLLECTION).add(interest)
    info(logger, "Stored project interest", interest_id=ref.id, project_id=body["projectId"])
    return {"id": ref.id, **interest}


def _award_join_points(db, user_id):
    ref = db.collection(MEMBERS_COLLECTION).document(user_id)
    doc = ref.get()
    if not doc.exists:
        warning(logger, "Cannot award points to unknown member", user_id=user_id)
        return
    points = (doc.to_dict() or {}).get("points") or 0
    ref.update({"points": points + JOIN_POINTS, "updatedAt": now()})


def decide_interest(body):
    interest_id = body.get("interestId")
    status = body.get("status")
    if not interest_id or not status:
        raise ValidationError("Missing interestId or status")
    require_choice(status, INTEREST_STATUSES, "status")

    db = get_db()
    ref = db.collection(INTERESTS_COLLECTION).document(interest_id)
    doc = ref.get()
    if not doc.exists:
        raise NotFoundError("Project interest", interest_id)
    interest = doc.to_dict() or {}
    project_id = body.get("projectId") or interest.get("projectId")
    user_id = body.get("userId") or interest.get("userId")

    if status == "approved" and project_id and user_id:
        member = _lookup(db, MEMBERS_COLLECTION, user_id) or {}
        db.collection(PROJECT_MEMBERS_COLLECTION).add({
            "projectId": project_id,
            "userId": user_id,
            "userName": member.get("name") or "Unknown User",
            "userEmail": member.get("email") or "",
            "role": "member",
            "joinedAt": now(),
            "addedBy": body.get("ownerId") or "project-owner",
        })
        try:
            _award_join_points(db, user_id)
        except Exception as e:
            # Membership is already recorded; points are a bonus
            warning(logger, "Failed to award join points", user_id=user_id, error=str(e))

    db.collection(DECISIONS_COLLECTION).add({
        "type": "project_interest",
        "interestId": interest_id,
        "projectId": project_id,
        "userId": user_id,
        "decision": status,
        "decidedBy": body.get("ownerId") or "owner",
        "timestamp": now(),
        "interestData": interest,
    })
    ref.delete()
    info(logger, "Decided project interest", interest_id=interest_id, decision=status)
    return {
        "ok": True,
        "message": f"Request {status}!",
        "data": {"id": interest_id, "status": status, "deleted": True},
    }


def delete_interest(interest_id):
    if not interest_id:
        raise ValidationError("Missing interest ID")
    get_db().collection(INTERESTS_COLLECTION).document(interest_id).delete()
    info(logger, "Deleted project interest", interest_id=interest_id)


def list_project_members(project_id):
    if not project_id:
        raise ValidationError("Missing projectId")
    docs = get_db().collection(PROJECT_MEMBERS_COLLECTION).where("projectId", "==", project_id).stream()
    return [doc_to_dict(doc) for doc in docs]


def remove_project_member(project_member_id):
    ref = get_db().collection(PROJECT_MEMBERS_COLLECTION).document(project_member_id)
    doc = ref.get()
    if not doc.exists:
        raise NotFoundError("Project member", project_member_id)
    if (doc.to_dict() or {}).get("role") == "owner":
        raise ValidationError("The project owner cannot be removed")
    ref.delete()
    info(logger, "Removed project member", project_member_id=project_member_id)
