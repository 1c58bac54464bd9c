from google.api_core.exceptions import FailedPrecondition

from common.exceptions import ValidationError
from common.log import get_logger, info, warning, exception
from common.utils.webpush import (
    list_all_subscriptions,
    normalize_payload,
    remove_subscription_by_endpoint,
    save_subscription,
    send_to_subscriptions,
)
from db.db import get_db, now, to_datetime
from services.hackathon_notifications import SCHEDULES_COLLECTION

logger = get_logger("webpush_service")

NOTIFICATIONS_COLLECTION = "notifications"
BROADCAST_AUDIENCES = ("subscribed", "all")


def subscribe(body):
    subscription = body.get("subscription")
    fcm_token = body.get("fcmToken")
    if not (subscription and subscription.get("endpoint")) and not fcm_token:
        raise ValidationError("Invalid subscription")
    doc_id = save_subscription(subscription=subscription, user_id=body.get("userId"), fcm_token=fcm_token)
    return {"ok": True, "id": doc_id}


def unsubscribe(body):
    endpoint = body.get("endpoint") or (body.get("subscription") or {}).get("endpoint")
    if not endpoint:
        raise ValidationError("Missing endpoint")
    remove_subscription_by_endpoint(endpoint)
    return {"ok": True}


def _target_subscriptions(audience):
    subscriptions = list_all_subscriptions()
    if audience in BROADCAST_AUDIENCES or audience is None:
        return subscriptions
    if isinstance(audience, dict) and audience.get("userId"):
        return [s for s in subscriptions if s.get("userId") == audience["userId"]]
    warning(logger, "Unknown audience, nothing sent", audience=audience)
    return []


def send_now(body):
    payload = normalize_payload(body.get("payload"))
    audience = {"userId": body["userId"]} if body.get("userId") else "all"
    results = send_to_subscriptions(_target_subscriptions(audience), payload)
    info(logger, "Sent push notification", title=payload["title"], recipients=len(results))
    return {"results": results}


def schedule_notification(body):
    """One ad hoc schedule doc; processed by process_due_schedules"""
    send_at = to_datetime(body.get("sendAt"))
    if send_at is None:
        raise ValidationError("sendAt must be an ISO timestamp")
    payload = normalize_payload(body.get("payload"))
    _, ref = get_db().collection(SCHEDULES_COLLECTION).add({
        "sendAt": send_at,
        "payload": payload,
        "audience": body.get("audience") or "subscribed",
        "meta": body.get("meta") or {"type": "adhoc"},
        "status": "pending",
        "createdAt": now(),
    })
    info(logger, "Scheduled push notification", id=ref.id, send_at=send_at.isoformat())
    return {"ok": True, "id": ref.id, "sendAt": send_at.isoformat()}


def get_due_schedules(current_time=None):
    """
    Pending schedules whose sendAt has passed. Without the composite
    (status, sendAt) index Firestore raises FailedPrecondition; fall back to
    querying by status alone and filtering here.
    """
    current_time = current_time or now()
    collection = get_db().collection(SCHEDULES_COLLECTION)
    try:
        docs = list(collection.where("status", "==", "pending").where("sendAt", "<=", current_time).stream())
    except FailedPrecondition as e:
        if "requires an index" not in str(e):
            raise
        warning(logger, "Composite index missing for schedules query, filtering in memory")
        docs = []
        for doc in collection.where("status", "==", "pending").stream():
            send_at = to_datetime((doc.to_dict() or {}).get("sendAt"))
            if send_at is not None and send_at <= current_time:
                docs.append(doc)
    return docs


def _record_notifications(db, subscriptions, payload, tag, meta):
    user_ids = {s["userId"] for s in subscriptions if s.get("userId")}
    data = payload.get("data") or {}
    for user_id in user_ids:
        db.collection(NOTIFICATIONS_COLLECTION).add({
            "userId": user_id,
            "title": payload.get("title") or "CODE 4O4",
            "body": payload.get("body") or "",
            "icon": payload.get("icon") or "/icon-192x192.png",
            "url": data.get("url") or payload.get("url") or "/",
            "tag": tag,
            "source": tag or (meta or {}).get("type") or "webpush-schedule",
            "read": False,
            "createdAt": now(),
        })
    return len(user_ids)


def process_due_schedules(current_time=None):
    """
    Deliver every due schedule, one at a time. Each doc ends up either
    "sent" (with per-subscription results) or "failed" (with the error).
    """
    db = get_db()
    processed = []
    for doc in get_due_schedules(current_time):
        d = doc.to_dict() or {}
        ref = db.collection(SCHEDULES_COLLECTION).document(doc.id)
        try:
            payload = normalize_payload(d.get("payload"))
            subscriptions = _target_subscriptions(d.get("audience"))
            results = send_to_subscriptions(subscriptions, payload)
            recorded = _record_notifications(db, subscriptions, payload, payload.get("tag"), d.get("meta"))
            ref.update({"status": "sent", "sentAt": now(), "results": results})
            info(logger, "Processed schedule", id=doc.id, recipients=len(results), recorded=recorded)
            processed.append({"id": doc.id, "status": "sent", "results": results})
        except Exception as e:
            exception(logger, "Failed to process schedule", exc_info=e, id=doc.id)
            ref.update({"status": "failed", "error": str(e), "triedAt": now()})
            processed.append({"id": doc.id, "status": "failed", "error": str(e)})

    if processed:
        info(logger, "Processed due schedules", count=len(processed))
    return {"processed": processed}
