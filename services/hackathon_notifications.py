"""
DevForge day-of push notifications.

The schedule is a fixed list of offsets from the hackathon start. Scheduling
writes one webpush_schedules document per future entry; the process-schedules
cron endpoint delivers them once sendAt has passed.
"""
import os
from datetime import datetime, timedelta

import pytz

from common.log import get_logger, info, debug, warning
from db.db import EPOCH, get_db, now, to_datetime, doc_to_dict

logger = get_logger("hackathon_notifications")

SCHEDULES_COLLECTION = "webpush_schedules"
IST = pytz.timezone("Asia/Kolkata")

# December 20, 2025 07:00 IST
HACKATHON_DATE = IST.localize(datetime(2025, 12, 20, 7, 0))

ICON = "/app-icon-192.png"
BADGE = "/app-icon-72.png"


def _template(title, body, tag, data_type, vibrate, require_interaction=False):
    template = {
        "title": title,
        "body": body,
        "icon": ICON,
        "badge": BADGE,
        "tag": tag,
        "data": {"url": "/hackathon", "type": data_type},
        "vibrate": vibrate,
    }
    if require_interaction:
        template["requireInteraction"] = True
    return template


NOTIFICATION_TEMPLATES = {
    "REGISTRATION_CONFIRMATION": _template(
        "Welcome to DevForge! 🚀",
        "Registration received! Check your email for next steps and important details.",
        "hackathon-registration", "registration", [200, 100, 200]),
    "DAY_BEFORE_REMINDER": _template(
        "DevForge Tomorrow! ⚡",
        "Get ready! Event starts at 7:00 AM IST. Bring your laptop, charger, and creativity!",
        "hackathon-reminder", "reminder", [200, 100, 200, 100, 200]),
    "CHECK_IN_REMINDER": _template(
        "Check-In Opens in 30 Minutes! 🎯",
        "Check-in starts at 7:00 AM. Head to NST Campus now!",
        "hackathon-checkin", "checkin", [300, 100, 300], require_interaction=True),
    "OPENING_CEREMONY": _template(
        "Opening Ceremony Starting Soon! 🎉",
        "Join us in 15 minutes for the kickoff at 8:00 AM!",
        "hackathon-opening", "ceremony", [200, 100, 200]),
    "CODING_BEGINS": _template(
        "Coding Starts in 5 Minutes! 💻",
        "Time to build something amazing! Let the hacking begin at 9:00 AM!",
        "hackathon-coding", "coding", [200, 100, 200, 100, 200]),
    "LUNCH_BREAK": _template(
        "Lunch Break in 15 Minutes! 🍕",
        "Take a break at 1:00 PM, refuel, and network with fellow hackers!",
        "hackathon-lunch", "break", [200, 100, 200]),
    "MID_EVALUATION": _template(
        "Mid-Evaluation Starting Soon! 📊",
        "Mentors are ready to help at 2:00 PM. Check in and get feedback!",
        "hackathon-evaluation", "evaluation", [200, 100, 200]),
    "FINAL_SUBMISSION_WARNING": _template(
        "1 Hour Until Submission Deadline! ⏰",
        "Final submissions due at 6:00 PM. Upload to Devpost now!",
        "hackathon-submission-warning", "submission", [300, 100, 300, 100, 300], require_interaction=True),
    "FINAL_SUBMISSION_REMINDER": _template(
        "15 Minutes to Submit! 🚨",
        "Last chance! Submit your project to Devpost before 6:00 PM!",
        "hackathon-submission-final", "submission", [400, 100, 400, 100, 400], require_interaction=True),
    "DEMOS_JUDGING": _template(
        "Demo Time! 🎬",
        "Demos and judging start at 6:30 PM. Get ready to present your solution!",
        "hackathon-demos", "demos", [200, 100, 200]),
    "CLOSING_CEREMONY": _template(
        "Closing Ceremony in 10 Minutes! 🏆",
        "Winners will be announced at 7:00 PM. Don't miss it!",
        "hackathon-closing", "ceremony", [300, 100, 300, 100, 300], require_interaction=True),
}

# (offset from start, meta.type, template key, description)
SCHEDULE = [
    (timedelta(hours=-13), "day-before-reminder", "DAY_BEFORE_REMINDER", "Reminder sent 1 day before event"),
    (timedelta(minutes=-30), "checkin-reminder", "CHECK_IN_REMINDER", "30 minutes before check-in"),
    (timedelta(minutes=45), "opening-ceremony", "OPENING_CEREMONY", "15 minutes before opening ceremony at 8:00 AM"),
    (timedelta(hours=1, minutes=55), "coding-begins", "CODING_BEGINS", "5 minutes before coding starts at 9:00 AM"),
    (timedelta(hours=5, minutes=45), "lunch-break", "LUNCH_BREAK", "15 minutes before lunch at 1:00 PM"),
    (timedelta(hours=6, minutes=45), "mid-evaluation", "MID_EVALUATION", "15 minutes before mid-evaluation at 2:00 PM"),
    (timedelta(hours=10), "submission-warning", "FINAL_SUBMISSION_WARNING", "1 hour before final submission at 6:00 PM"),
    (timedelta(hours=10, minutes=45), "submission-final", "FINAL_SUBMISSION_REMINDER", "15 minutes before final submission at 6:00 PM"),
    (timedelta(hours=11, minutes=15), "demos-judging", "DEMOS_JUDGING", "15 minutes before demos at 6:30 PM"),
    (timedelta(hours=11, minutes=50), "closing-ceremony", "CLOSING_CEREMONY", "10 minutes before closing ceremony at 7:00 PM"),
]

HACKATHON_NOTIFICATION_TYPES = [entry[1] for entry in SCHEDULE]


def get_hackathon_date():
    """HACKATHON_DATE, unless overridden with an ISO timestamp in the environment"""
    override = os.environ.get("HACKATHON_DATE")
    if override:
        parsed = to_datetime(override)
        if parsed is not None:
            return parsed
        warning(logger, "Ignoring unparseable HACKATHON_DATE", value=override)
    return HACKATHON_DATE


def calculate_notification_schedule(hackathon_date=None):
    start = hackathon_date or get_hackathon_date()
    schedule = []
    for offset, notification_type, template_key, description in SCHEDULE:
        schedule.append({
            "sendAt": (start + offset).astimezone(pytz.utc),
            "payload": dict(NOTIFICATION_TEMPLATES[template_key]),
            "meta": {"type": notification_type, "description": description},
        })
    return schedule


def get_registration_notification(user_name=None):
    payload = dict(NOTIFICATION_TEMPLATES["REGISTRATION_CONFIRMATION"])
    if user_name:
        payload["body"] = f"Welcome {user_name}! Registration received. Check your email for next steps."
    return payload


def _has_pending(db, notification_type):
    existing = db.collection(SCHEDULES_COLLECTION) \
        .where("status", "==", "pending") \
        .where("meta.type", "==", notification_type) \
        .limit(1) \
        .stream()
    return any(True for _ in existing)


def schedule_hackathon_notifications(dry_run=False, hackathon_date=None, current_time=None):
    current_time = current_time or now()
    schedule = calculate_notification_schedule(hackathon_date)
    future = [n for n in schedule if n["sendAt"] > current_time]
    past = [n for n in schedule if n["sendAt"] <= current_time]

    if dry_run:
        return {
            "dryRun": True,
            "message": "Dry run - no notifications scheduled",
            "total": len(schedule),
            "future": len(future),
            "past": len(past),
            "notifications": [{
                "type": n["meta"]["type"],
                "description": n["meta"]["description"],
                "sendAt": n["sendAt"].isoformat(),
                "title": n["payload"]["title"],
                "body": n["payload"]["body"],
                "isPast": n["sendAt"] <= current_time,
            } for n in schedule],
        }

    db = get_db()
    results = []
    for notification in future:
        notification_type = notification["meta"]["type"]
        # Read-then-write; two concurrent callers can both schedule the same type
        if _has_pending(db, notification_type):
            debug(logger, "Skipping already scheduled notification", type=notification_type)
            results.append({"type": notification_type, "status": "skipped", "reason": "already scheduled"})
            continue

        _, ref = db.collection(SCHEDULES_COLLECTION).add({
            "sendAt": notification["sendAt"],
            "payload": notification["payload"],
            "audience": "subscribed",
            "meta": notification["meta"],
            "status": "pending",
            "createdAt": now(),
        })
        results.append({
            "type": notification_type,
            "status": "scheduled",
            "id": ref.id,
            "sendAt": notification["sendAt"].isoformat(),
        })

    scheduled = len([r for r in results if r["status"] == "scheduled"])
    info(logger, "Scheduled hackathon notifications", scheduled=scheduled, past=len(past))
    return {
        "ok": True,
        "scheduled": scheduled,
        "skipped": len(results) - scheduled,
        "pastNotifications": len(past),
        "results": results,
        "pastNotificationsList": [{
            "type": n["meta"]["type"],
            "description": n["meta"]["description"],
            "sendAt": n["sendAt"].isoformat(),
        } for n in past],
    }


def list_hackathon_notifications():
    docs = get_db().collection(SCHEDULES_COLLECTION) \
        .where("meta.type", "in", HACKATHON_NOTIFICATION_TYPES) \
        .stream()
    notifications = [doc_to_dict(doc) for doc in docs]
    # Sorted here so the query needs no composite index
    notifications.sort(key=lambda n: to_datetime(n.get("sendAt")) or EPOCH)
    return notifications


def clear_hackathon_notifications():
    db = get_db()
    docs = db.collection(SCHEDULES_COLLECTION) \
        .where("status", "==", "pending") \
        .where("meta.type", "in", HACKATHON_NOTIFICATION_TYPES) \
        .stream()
    deleted = 0
    for doc in docs:
        db.collection(SCHEDULES_COLLECTION).document(doc.id).delete()
        deleted += 1
    info(logger, "Cleared pending hackathon notifications", deleted=deleted)
    return deleted
