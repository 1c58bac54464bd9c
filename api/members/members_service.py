from common.exceptions import MissingFieldError, NotFoundError, ValidationError
from common.log import get_logger, info, warning
from common.utils.email import (
    send_bulk_credentials_emails,
    send_credentials_email,
    send_member_removal_email,
)
from common.utils.slack import send_slack_audit
from common.utils.validators import (
    optional_url,
    require_choice,
    require_email,
    require_fields,
    sanitize_string,
)
from db.db import EPOCH, doc_to_dict, get_db, now, to_datetime
from model.member import EXPERIENCE_LEVELS, Member, profile_fields, strip_private_fields
from services.credentials_service import (
    dicebear_avatar,
    generate_member_id,
    generate_password,
    generate_username,
)

logger = get_logger("members_service")

MEMBERS_COLLECTION = "members"
PENDING_COLLECTION = "pendingMembers"
DECISIONS_COLLECTION = "adminDecisions"
DEFAULT_ADMIN_ID = "admin"

JOIN_ROLES = ["student", "mentor", "alumni"]
DECISIONS = ["approved", "rejected"]


def list_members():
    docs = get_db().collection(MEMBERS_COLLECTION).stream()
    return [strip_private_fields(doc_to_dict(doc)) for doc in docs]


def get_member(member_id):
    doc = get_db().collection(MEMBERS_COLLECTION).document(member_id).get()
    if not doc.exists:
        raise NotFoundError("Member", member_id)
    return doc_to_dict(doc)


def upsert_member(body):
    """Create a member, or update the one named by body["id"]"""
    require_fields(body, "name", "email")
    db = get_db()

    member = {
        "name": sanitize_string(body["name"]),
        "email": require_email(body["email"]),
        "role": body.get("role") or "student",
    }
    for optional in ("avatar", "points", "badges"):
        if body.get(optional) is not None:
            member[optional] = body[optional]

    if body.get("id"):
        ref = db.collection(MEMBERS_COLLECTION).document(body["id"])
        if not ref.get().exists:
            raise NotFoundError("Member", body["id"])
        member["updatedAt"] = now()
        ref.update(member)
        info(logger, "Updated member", member_id=body["id"])
        return {"id": body["id"], **member}

    member["createdAt"] = now()
    member.setdefault("points", 0)
    member.setdefault("badges", 0)
    _, ref = db.collection(MEMBERS_COLLECTION).add(member)
    info(logger, "Created member", member_id=ref.id)
    return {"id": ref.id, **member}


def get_profile(user_id):
    if not user_id:
        raise MissingFieldError("userId")
    return Member.deserialize(get_member(user_id)).public_profile()


def update_profile(body):
    user_id = body.get("userId")
    if not user_id:
        raise MissingFieldError("userId")
    member = Member.deserialize(get_member(user_id))

    updates = {field: body[field] for field in profile_fields if field in body}
    if "name" in updates and not sanitize_string(updates["name"]):
        raise ValidationError("Name cannot be empty")
    for url_field in ("github", "portfolio"):
        if url_field in updates:
            updates[url_field] = optional_url(updates[url_field])

    member.update_from_profile(updates)
    if updates:
        get_db().collection(MEMBERS_COLLECTION).document(user_id).update(dict(updates, updatedAt=now()))
        info(logger, "Updated profile", member_id=user_id, fields=sorted(updates))
    return member.public_profile()


def update_credentials(body):
    member_id = body.get("memberId")
    if not member_id:
        raise ValidationError("Member ID is required")
    member = get_member(member_id)
    name = member.get("name") or ""

    username = body.get("username") or generate_username(name)
    password = body.get("password") or generate_password(name)
    get_db().collection(MEMBERS_COLLECTION).document(member_id).update({
        "username": username,
        "password": password,
        "credentialsUpdated": now(),
    })
    info(logger, "Updated credentials", member_id=member_id, username=username)

    email_sent = False
    if body.get("sendEmail", True) and member.get("email"):
        result = send_credentials_email(member["email"], name, username, password)
        email_sent = result["success"]

    return {
        "ok": True,
        "message": "Credentials updated and email sent successfully" if email_sent else "Credentials updated successfully",
        "credentials": {"username": username, "password": password},
        "emailSent": email_sent,
    }


def regenerate_all_credentials(send_emails=True):
    db = get_db()
    updated = []
    for doc in db.collection(MEMBERS_COLLECTION).stream():
        d = doc.to_dict() or {}
        name = d.get("name") or ""
        username = generate_username(name)
        password = generate_password(name)
        db.collection(MEMBERS_COLLECTION).document(doc.id).update({
            "username": username,
            "password": password,
            "credentialsUpdated": now(),
        })
        updated.append({"id": doc.id, "name": name, "email": d.get("email"), "username": username, "password": password})

    if not updated:
        return {"ok": False, "message": "No members found"}

    email_results = []
    if send_emails:
        email_results = send_bulk_credentials_emails([m for m in updated if m["email"]])

    sent = len([r for r in email_results if r["success"]])
    info(logger, "Regenerated credentials", total=len(updated), emails_sent=sent)
    return {
        "ok": True,
        "message": f"Successfully updated credentials for {len(updated)} members",
        "totalMembers": len(updated),
        "emailsSent": sent,
        "emailsFailed": len(email_results) - sent,
        "members": [{"id": m["id"], "name": m["name"], "username": m["username"]} for m in updated],
    }


def is_whitelisted(member, whitelist):
    name = (member.get("name") or "").lower().strip()
    username = (member.get("username") or "").lower().strip()
    email = (member.get("email") or "").lower().strip()
    for token in whitelist:
        match_token = (token or "").lower().strip()
        if match_token and (match_token in name or match_token in username or match_token in email):
            return True
    return False


def prune_members(whitelist, send_emails=True, dry_run=False):
    """Remove every member matching no whitelist token, mailing each a removal notice"""
    if not whitelist:
        raise ValidationError("A non-empty whitelist is required")
    db = get_db()
    members = [doc_to_dict(doc) for doc in db.collection(MEMBERS_COLLECTION).stream()]
    to_remove = [m for m in members if not is_whitelisted(m, whitelist)]
    info(logger, "Pruning members", total=len(members), removing=len(to_remove), dry_run=dry_run)

    removed = []
    for member in to_remove:
        entry = {"id": member["id"], "name": member.get("name"), "email": member.get("email")}
        if dry_run:
            removed.append(entry)
            continue
        if send_emails and member.get("email"):
            entry["emailSent"] = send_member_removal_email(member["email"], member.get("name"))["success"]
        db.collection(MEMBERS_COLLECTION).document(member["id"]).delete()
        removed.append(entry)

    return {
        "ok": True,
        "dryRun": dry_run,
        "total": len(members),
        "kept": len(members) - len(to_remove),
        "removed": removed,
    }


def create_join_request(body):
    name = sanitize_string(body.get("displayName") or body.get("name"))
    if len(name) < 2:
        raise ValidationError("Tell us your name.")
    email = require_email(body.get("email"))
    phone = sanitize_string(body.get("phone"))
    if len(phone) < 8:
        raise ValidationError("Add a contact number.")
    goals = sanitize_string(body.get("goals"))
    if len(goals) < 20:
        raise ValidationError("Share more about what you want to build.")
    availability = sanitize_string(body.get("availability"))
    if not 5 <= len(availability) <= 60:
        raise ValidationError("Let us know when you are usually free.")
    interests = [i for i in (body.get("interests") or []) if isinstance(i, str) and i.strip()]
    if not interests:
        raise ValidationError("Pick at least one interest.")

    request_data = {
        "name": name,
        "email": email,
        "phone": phone,
        "github": optional_url(body.get("github")),
        "portfolio": optional_url(body.get("portfolio")),
        "goals": goals,
        "experience": require_choice(body.get("experience") or "intermediate", EXPERIENCE_LEVELS, "experience"),
        "role": require_choice(body.get("role") or "student", JOIN_ROLES, "role"),
        "availability": availability,
        "interests": interests,
        "status": "pending",
        "createdAt": now(),
    }
    _, ref = get_db().collection(PENDING_COLLECTION).add(request_data)
    info(logger, "Stored join request", pending_id=ref.id)

    send_slack_audit(action="join_request", message=f"New join request from {name}", payload={"email": email, "role": request_data["role"]})
    return {"id": ref.id, **request_data}


def list_pending_members():
    docs = get_db().collection(PENDING_COLLECTION).where("status", "==", "pending").stream()
    pending = [doc_to_dict(doc) for doc in docs]
    # Newest first; sorted here so the query needs no composite index
    pending.sort(key=lambda m: to_datetime(m.get("createdAt")) or EPOCH, reverse=True)
    return pending


def _approve(pending_id, pending, admin_id):
    db = get_db()
    user_id = generate_member_id()
    name = pending.get("name") or ""
    username = generate_username(name)
    password = generate_password(name)
    member = Member.deserialize({
        "id": user_id,
        "name": name,
        "email": pending.get("email", ""),
        "phone": pending.get("phone", ""),
        "github": pending.get("github"),
        "portfolio": pending.get("portfolio"),
        "interests": pending.get("interests", []),
        "experience": pending.get("experience") or "beginner",
        "goals": pending.get("goals", ""),
        "role": pending.get("role") or "student",
        "availability": pending.get("availability", ""),
        "points": 0,
        "badges": 0,
        "avatar": dicebear_avatar(pending.get("email") or user_id),
        "joinedAt": now(),
        "approvedBy": admin_id,
        "username": username,
        "password": password,
        "credentialsUpdated": now(),
    })
    db.collection(MEMBERS_COLLECTION).document(user_id).set(member.serialize())
    info(logger, "Approved member", pending_id=pending_id, member_id=user_id)

    email_sent = False
    if member.email:
        # Approval stands even when the mail does not go out
        result = send_credentials_email(member.email, name, username, password)
        email_sent = result["success"]
        if not email_sent:
            warning(logger, "Credentials email failed", member_id=user_id, error=result.get("error"))

    return {
        "userId": user_id,
        "credentials": {"username": username, "password": password},
        "name": name,
        "email": member.email,
        "emailSent": email_sent,
    }


def decide_pending_member(member_id, decision, admin_id=None):
    if not member_id or not decision:
        raise ValidationError("memberId and decision are required")
    require_choice(decision, DECISIONS, "decision")

    db = get_db()
    ref = db.collection(PENDING_COLLECTION).document(member_id)
    doc = ref.get()
    if not doc.exists:
        raise NotFoundError("Pending member", member_id)
    pending = doc.to_dict() or {}
    admin_id = admin_id or DEFAULT_ADMIN_ID

    result = {"ok": True, "message": f"Member {decision}"}
    if decision == "approved":
        result.update(_approve(member_id, pending, admin_id))

    db.collection(DECISIONS_COLLECTION).add({
        "type": "member_approval",
        "memberId": member_id,
        "decision": decision,
        "adminId": admin_id,
        "memberData": pending,
        "timestamp": now(),
    })
    ref.delete()
    send_slack_audit(action="member_decision", message=f"Join request {member_id} {decision}", payload={"adminId": admin_id})
    return result


def admin_decision(request_id, decision, admin_id=None):
    """Admin dashboard shortcut: approve, or put a request on hold"""
    require_choice(decision, ["approve", "hold"], "decision")
    if decision == "approve":
        return decide_pending_member(request_id, "approved", admin_id)

    ref = get_db().collection(PENDING_COLLECTION).document(request_id)
    if not ref.get().exists:
        raise NotFoundError("Pending member", request_id)
    ref.update({"status": "hold", "updatedAt": now()})
    info(logger, "Put join request on hold", pending_id=request_id)
    return {"ok": True, "message": "Request put on hold"}


def authenticate(username, password):
    """Member dict (without password) for matching credentials, else None"""
    if not username or not password:
        return None
    docs = get_db().collection(MEMBERS_COLLECTION) \
        .where("username", "==", username.strip().lower()) \
        .stream()
    for doc in docs:
        d = doc_to_dict(doc)
        if d.get("password") == password:
            return strip_private_fields(d)
    warning(logger, "Failed login attempt", username=username)
    return None
