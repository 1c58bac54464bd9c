from common.exceptions import MissingFieldError, ValidationError
from common.log import get_logger, info
from db.db import EPOCH, doc_to_dict, get_db, to_datetime

logger = get_logger("notifications_service")

NOTIFICATIONS_COLLECTION = "notifications"
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def list_notifications(user_id, limit=DEFAULT_LIMIT):
    if not user_id:
        raise MissingFieldError("userId")
    try:
        limit = max(1, min(int(limit or DEFAULT_LIMIT), MAX_LIMIT))
    except (TypeError, ValueError):
        raise ValidationError("limit must be a number")
    docs = get_db().collection(NOTIFICATIONS_COLLECTION).where("userId", "==", user_id).stream()
    notifications = [doc_to_dict(doc) for doc in docs]
    # userId + createdAt ordering would need a composite index
    notifications.sort(key=lambda n: to_datetime(n.get("createdAt")) or EPOCH, reverse=True)
    notifications = notifications[:limit]
    return {
        "notifications": notifications,
        "unreadCount": len([n for n in notifications if not n.get("read")]),
    }


def mark_read(user_id, notification_ids=None, mark_all=False):
    """Only the user's own notifications are touched; returns how many changed"""
    if not user_id:
        raise MissingFieldError("userId")
    db = get_db()
    collection = db.collection(NOTIFICATIONS_COLLECTION)

    if mark_all:
        targets = [doc.id for doc in collection.where("userId", "==", user_id).where("read", "==", False).stream()]
    else:
        targets = []
        for notification_id in notification_ids or []:
            doc = collection.document(notification_id).get()
            if doc.exists and (doc.to_dict() or {}).get("userId") == user_id:
                targets.append(notification_id)

    for notification_id in targets:
        collection.document(notification_id).update({"read": True})
    info(logger, "Marked notifications read", user_id=user_id, count=len(targets))
    return len(targets)
