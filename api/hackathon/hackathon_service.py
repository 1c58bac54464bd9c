import csv
import io

from common.exceptions import ValidationError
from common.log import get_logger, info, warning
from common.utils.email import send_hackathon_registration_email
from common.utils.slack import send_slack_audit
from common.utils.webpush import list_all_subscriptions, send_to_subscriptions
from db.db import EPOCH, doc_to_dict, get_db, now, to_datetime
from model.hackathon_registration import (
    EXPORT_HEADERS,
    GENDERS,
    IMPORT_COLUMNS,
    REGISTRATION_TYPES,
    HackathonRegistration,
)
from services.hackathon_notifications import get_registration_notification

logger = get_logger("hackathon_service")

REGISTRATIONS_COLLECTION = "hackathon_registrations"


def _notify_registrant(user_id, name):
    subscriptions = [s for s in list_all_subscriptions() if s.get("userId") == user_id]
    if subscriptions:
        send_to_subscriptions(subscriptions, get_registration_notification(name))


def register(body):
    registration = HackathonRegistration.deserialize(body)
    registration.validate()
    registration.created_at = now()

    _, ref = get_db().collection(REGISTRATIONS_COLLECTION).add(registration.serialize())
    registration.id = ref.id
    lead = registration.lead_member()
    info(logger, "Stored hackathon registration", registration_id=ref.id, type=registration.type,
         members=len(registration.members))

    # Registration is saved; mail and push failures only get logged
    email_result = send_hackathon_registration_email(
        to=lead.email,
        name=lead.name,
        registration_type=registration.type,
        team_name=registration.team_name,
        member_count=len(registration.members),
    )
    if not email_result["success"]:
        warning(logger, "Registration email failed", registration_id=ref.id, error=email_result.get("error"))

    if body.get("userId"):
        try:
            _notify_registrant(body["userId"], lead.name)
        except Exception as e:
            warning(logger, "Registration push failed", registration_id=ref.id, error=str(e))

    send_slack_audit(action="hackathon_registration", message=f"DevForge registration from {registration.team_name or lead.name}",
                     payload={"type": registration.type, "members": len(registration.members)})
    return {"id": ref.id, "emailSent": email_result["success"]}


def send_confirmation(body):
    email = body.get("email")
    name = body.get("name")
    registration_type = body.get("type")
    member_count = body.get("memberCount")
    if not email or not name or not registration_type or not member_count:
        raise ValidationError("Missing required fields")
    if registration_type not in REGISTRATION_TYPES:
        raise ValidationError("Invalid registration type")
    if registration_type == "team" and not body.get("teamName"):
        raise ValidationError("Team name is required for team registrations")

    return send_hackathon_registration_email(
        to=email,
        name=name,
        registration_type=registration_type,
        team_name=body.get("teamName"),
        member_count=member_count,
    )


def list_registrations():
    docs = get_db().collection(REGISTRATIONS_COLLECTION).stream()
    registrations = [doc_to_dict(doc) for doc in docs]
    registrations.sort(key=lambda r: to_datetime(r.get("createdAt")) or EPOCH, reverse=True)
    return registrations


def export_registrations_csv(registrations=None):
    registrations = list_registrations() if registrations is None else registrations
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(EXPORT_HEADERS)
    for registration in registrations:
        created_at = to_datetime(registration.get("createdAt"))
        for member in registration.get("members") or []:
            writer.writerow([
                registration.get("id"),
                registration.get("type"),
                registration.get("teamName") or "N/A",
                member.get("name", ""),
                member.get("email", ""),
                member.get("phone", ""),
                member.get("gender", ""),
                member.get("github") or "",
                member.get("portfolio") or "",
                created_at.isoformat() if created_at else "N/A",
            ])
    return out.getvalue()


def import_registrations_csv(text):
    """
    One registration per row (type, team name, then a single member). The
    header row is skipped; rows with fewer than four columns are ignored.
    """
    if not text or not text.strip():
        raise ValidationError("CSV body is empty")

    collection = get_db().collection(REGISTRATIONS_COLLECTION)
    imported = 0
    reader = csv.reader(io.StringIO(text))
    next(reader, None)
    for cols in reader:
        cols = [c.strip() for c in cols]
        if len(cols) < 4:
            continue
        row = dict(zip(IMPORT_COLUMNS, cols + [""] * (len(IMPORT_COLUMNS) - len(cols))))
        gender = row["gender"].lower()
        collection.add({
            "type": "team" if row["type"].lower() == "team" else "individual",
            "teamName": row["teamName"],
            "members": [{
                "name": row["name"],
                "email": row["email"].lower(),
                "phone": row["phone"],
                "gender": gender if gender in GENDERS else "other",
                "github": row["github"],
                "portfolio": row["portfolio"],
            }],
            "createdAt": now(),
        })
        imported += 1

    info(logger, "Imported hackathon registrations", count=imported)
    return imported
