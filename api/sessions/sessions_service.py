from datetime import date

from common.exceptions import NotFoundError, ValidationError
from common.log import get_logger, info
from common.utils.validators import require_fields, sanitize_string
from db.db import doc_to_dict, get_db, now
from model.session import Session, normalize_topics, parse_session_date, weekday_for

logger = get_logger("sessions_service")

SESSIONS_COLLECTION = "sessions"


def _load_sessions():
    return [Session.deserialize(doc_to_dict(doc)) for doc in get_db().collection(SESSIONS_COLLECTION).stream()]


def _with_status(session, today):
    d = session.serialize()
    d["status"] = session.effective_status(today)
    return d


def list_upcoming_sessions(today=None):
    today = today or date.today()
    sessions = [s for s in _load_sessions() if s.effective_status(today) != "archived"]
    sessions.sort(key=lambda s: s.date)
    return [_with_status(s, today) for s in sessions]


def list_all_sessions(today=None):
    """Every session, split the way the admin page shows them"""
    today = today or date.today()
    upcoming, past = [], []
    for session in sorted(_load_sessions(), key=lambda s: s.date):
        (past if session.effective_status(today) == "archived" else upcoming).append(_with_status(session, today))
    past.reverse()
    return {"upcoming": upcoming, "past": past}


def _session_fields(body):
    fields = {}
    if "title" in body:
        fields["title"] = sanitize_string(body["title"], max_length=160)
        if not fields["title"]:
            raise ValidationError("Title cannot be empty")
    if "date" in body:
        try:
            fields["date"] = parse_session_date(body["date"])
        except (TypeError, ValueError):
            raise ValidationError("date must be YYYY-MM-DD")
        fields["weekday"] = body.get("weekday") or weekday_for(fields["date"])
    if "topics" in body:
        fields["topics"] = normalize_topics(body["topics"])
    for text_field in ("description", "duration", "location"):
        if text_field in body:
            fields[text_field] = sanitize_string(body[text_field])
    if "status" in body:
        fields["status"] = body["status"] or None
    return fields


def create_session(body, created_by=None):
    require_fields(body, "title", "date")
    session = Session.deserialize(_session_fields(body))
    session.created_by = created_by
    session.created_at = now()
    data = session.serialize()
    data.pop("id")
    _, ref = get_db().collection(SESSIONS_COLLECTION).add(data)
    info(logger, "Created session", session_id=ref.id, date=session.date)
    return {"id": ref.id, **data}


def update_session(session_id, body):
    ref = get_db().collection(SESSIONS_COLLECTION).document(session_id)
    if not ref.get().exists:
        raise NotFoundError("Session", session_id)
    fields = _session_fields(body)
    fields["updatedAt"] = now()
    ref.update(fields)
    info(logger, "Updated session", session_id=session_id)
    return {"id": session_id, **fields}


def delete_session(session_id):
    ref = get_db().collection(SESSIONS_COLLECTION).document(session_id)
    if not ref.get().exists:
        raise NotFoundError("Session", session_id)
    ref.delete()
    info(logger, "Deleted session", session_id=session_id)


def archive_session(session_id):
    return update_session_status(session_id, "archived")


def update_session_status(session_id, status):
    ref = get_db().collection(SESSIONS_COLLECTION).document(session_id)
    if not ref.get().exists:
        raise NotFoundError("Session", session_id)
    fields = {"status": status, "updatedAt": now()}
    if status == "archived":
        fields["archivedAt"] = now()
    ref.update(fields)
    return {"id": session_id, **fields}
