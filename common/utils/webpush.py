"""
Web Push (VAPID) and Firebase Cloud Messaging delivery, plus the
webpush_subscriptions collection that feeds both.

A subscription document is keyed by the URL-encoded push endpoint and holds
either a browser PushSubscription (``subscription``) or an FCM registration
token (``fcmToken``), with the member's ``userId`` when known.
"""
import json
from urllib.parse import quote

from firebase_admin import messaging
from firebase_admin.exceptions import FirebaseError
from pywebpush import webpush, WebPushException

from common.log import get_logger, info, warning, error
from common.utils import safe_get_env_var, is_configured
from db.db import get_db, get_firebase_app, is_test_environment, now

logger = get_logger("webpush")

SUBSCRIPTIONS_COLLECTION = "webpush_subscriptions"
GONE_STATUS_CODES = (404, 410)
DEFAULT_TTL_SECONDS = 60 * 60 * 12


def subscription_doc_id(endpoint):
    # Same escaping as JavaScript's encodeURIComponent so existing ids still match
    return quote(endpoint, safe="!~*'()")


def get_vapid_public_key():
    key = safe_get_env_var("VAPID_PUBLIC_KEY")
    return key if is_configured(key) else None


def normalize_payload(raw=None):
    """
    Fill in the presentation defaults for a notification. Anything the admin
    supplied wins.
    """
    raw = raw or {"title": "Test", "body": "This is a test notification"}
    payload = {
        "title": raw.get("title") or "CODE 4O4",
        "body": raw.get("body") or "",
        "icon": raw.get("icon") or "/app-icon-192.png",
        "badge": raw.get("badge") or "/app-icon-72.png",
        "vibrate": raw.get("vibrate") or [200, 100, 200],
        "renotify": raw["renotify"] if raw.get("renotify") is not None else False,
        "requireInteraction": bool(raw.get("requireInteraction", False)),
        "actions": raw.get("actions") or [],
        "data": raw.get("data") or {},
    }
    # tag controls whether notifications replace each other or stack
    tag = raw.get("tag") or raw.get("type")
    if tag:
        payload["tag"] = tag
    if raw.get("image"):
        payload["image"] = raw["image"]
    return payload


def save_subscription(subscription=None, user_id=None, fcm_token=None):
    if subscription and subscription.get("endpoint"):
        key = subscription["endpoint"]
    elif fcm_token:
        key = f"fcm:{fcm_token}"
    else:
        raise ValueError("A subscription endpoint or an FCM token is required")

    doc_id = subscription_doc_id(key)
    data = {"userId": user_id, "createdAt": now()}
    if subscription:
        data["subscription"] = subscription
    if fcm_token:
        data["fcmToken"] = fcm_token

    get_db().collection(SUBSCRIPTIONS_COLLECTION).document(doc_id).set(data, merge=True)
    info(logger, "Saved push subscription", doc_id=doc_id, user_id=user_id)
    return doc_id


def remove_subscription_by_endpoint(endpoint):
    get_db().collection(SUBSCRIPTIONS_COLLECTION).document(subscription_doc_id(endpoint)).delete()
    info(logger, "Removed push subscription", endpoint=endpoint)


def list_all_subscriptions():
    subscriptions = []
    for doc in get_db().collection(SUBSCRIPTIONS_COLLECTION).stream():
        d = doc.to_dict() or {}
        subscriptions.append({
            "id": doc.id,
            "subscription": d.get("subscription"),
            "fcmToken": d.get("fcmToken"),
            "userId": d.get("userId"),
        })
    return subscriptions


def send_notification_to_subscription(subscription, payload):
    """
    Deliver one payload to one browser subscription.
    Returns {"success": bool, "error": {"statusCode", "message"} | None}.
    """
    private_key = safe_get_env_var("VAPID_PRIVATE_KEY")
    if not is_configured(private_key):
        return {"success": False, "error": {"statusCode": None, "message": "VAPID keys not configured"}}

    try:
        webpush(
            subscription_info=subscription,
            data=json.dumps(payload),
            vapid_private_key=private_key,
            vapid_claims={"sub": safe_get_env_var("VAPID_SUBJECT")},
            ttl=DEFAULT_TTL_SECONDS,
        )
        return {"success": True, "error": None}
    except WebPushException as e:
        status_code = e.response.status_code if e.response is not None else None
        warning(logger, "Web push delivery failed", endpoint=(subscription or {}).get("endpoint"), status_code=status_code)
        return {"success": False, "error": {"statusCode": status_code, "message": str(e)}}
    except Exception as e:
        error(logger, "Web push send error", endpoint=(subscription or {}).get("endpoint"), error=str(e))
        return {"success": False, "error": {"statusCode": None, "message": str(e)}}


def send_fcm_notification(token, payload):
    """Same contract as send_notification_to_subscription, for FCM tokens"""
    try:
        if not is_test_environment():
            get_firebase_app()

        data = {k: str(v) for k, v in (payload.get("data") or {}).items()}
        message = messaging.Message(
            token=token,
            notification=messaging.Notification(
                title=payload.get("title"),
                body=payload.get("body"),
                image=payload.get("image"),
            ),
            webpush=messaging.WebpushConfig(
                notification=messaging.WebpushNotification(
                    icon=payload.get("icon"),
                    badge=payload.get("badge"),
                    tag=payload.get("tag"),
                    require_interaction=payload.get("requireInteraction"),
                    vibrate=payload.get("vibrate"),
                ),
                fcm_options=messaging.WebpushFCMOptions(link=data["url"]) if data.get("url", "").startswith("https://") else None,
            ),
            data=data,
        )
        message_id = messaging.send(message)
        return {"success": True, "error": None, "messageId": message_id}
    except messaging.UnregisteredError as e:
        return {"success": False, "error": {"statusCode": 404, "message": str(e)}}
    except FirebaseError as e:
        error(logger, "FCM delivery failed", error=str(e))
        return {"success": False, "error": {"statusCode": None, "message": str(e)}}
    except Exception as e:
        error(logger, "FCM send error", error=str(e))
        return {"success": False, "error": {"statusCode": None, "message": str(e)}}


def deliver(wrapped, payload):
    if wrapped.get("fcmToken") and not wrapped.get("subscription"):
        return send_fcm_notification(wrapped["fcmToken"], payload)
    return send_notification_to_subscription(wrapped["subscription"], payload)


def send_to_subscriptions(subscriptions, payload):
    """
    Sequentially deliver to each subscription. Subscriptions the push service
    reports as gone (404/410) are deleted. Returns one
    {"endpoint", "success"} result per subscription.
    """
    db = get_db()
    results = []
    for wrapped in subscriptions:
        subscription = wrapped.get("subscription") or {}
        endpoint = subscription.get("endpoint")
        r = deliver(wrapped, payload)
        results.append({"endpoint": endpoint, "success": r["success"]})

        if not r["success"]:
            status_code = (r.get("error") or {}).get("statusCode")
            if status_code in GONE_STATUS_CODES:
                try:
                    db.collection(SUBSCRIPTIONS_COLLECTION).document(wrapped["id"]).delete()
                    info(logger, "Deleted gone subscription", doc_id=wrapped["id"])
                except Exception as e:
                    warning(logger, "Failed to remove gone subscription", doc_id=wrapped["id"], error=str(e))
    return results
