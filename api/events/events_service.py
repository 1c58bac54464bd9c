from common.exceptions import NotFoundError, ValidationError
from common.log import get_logger, info
from common.utils.validators import optional_url, require_fields, sanitize_string
from db.db import EPOCH, doc_to_dict, get_db, now, to_datetime

logger = get_logger("events_service")

EVENTS_COLLECTION = "events"
RSVPS_COLLECTION = "eventRsvps"


def list_events():
    events = [doc_to_dict(doc) for doc in get_db().collection(EVENTS_COLLECTION).stream()]
    events.sort(key=lambda e: to_datetime(e.get("date")) or EPOCH)
    return events


def create_event(body, created_by=None):
    require_fields(body, "title", "date")
    event_date = to_datetime(body["date"])
    if event_date is None:
        raise ValidationError("date must be an ISO timestamp")

    event = {
        "title": sanitize_string(body["title"], max_length=160),
        "description": sanitize_string(body.get("description")),
        "date": event_date,
        "location": sanitize_string(body.get("location")) or "Online",
        "type": sanitize_string(body.get("type")) or "workshop",
        "link": optional_url(body.get("link")),
        "createdBy": created_by,
        "createdAt": now(),
    }
    _, ref = get_db().collection(EVENTS_COLLECTION).add(event)
    info(logger, "Created event", event_id=ref.id)
    return {"id": ref.id, **event}


def rsvp(event_id, user_id):
    if not event_id or not user_id:
        raise ValidationError("Missing event or user id")
    db = get_db()
    if not db.collection(EVENTS_COLLECTION).document(event_id).get().exists:
        raise NotFoundError("Event", event_id)
    _, ref = db.collection(RSVPS_COLLECTION).add({
        "eventId": event_id,
        "userId": user_id,
        "createdAt": now(),
    })
    info(logger, "Stored RSVP", event_id=event_id, user_id=user_id)
    return ref.id
