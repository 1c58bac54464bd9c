import html
import smtplib
import time
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid

from decouple import config
from ratelimit import limits, sleep_and_retry

from common.log import get_logger, info, error, warning
from common.utils.email_templates import (
    APP_URL_DEFAULT,
    CREDENTIALS_HTML, CREDENTIALS_SUBJECT, CREDENTIALS_TEXT,
    REGISTRATION_HTML, REGISTRATION_SUBJECT, REGISTRATION_TEXT,
    REMOVAL_HTML, REMOVAL_SUBJECT,
)

logger = get_logger("email")

SMTP_NOT_CONFIGURED = "SMTP credentials not configured. Check environment variables."
BULK_SEND_DELAY_SECONDS = 1.0


def _smtp_settings():
    return {
        "host": config("SMTP_HOST", default=""),
        "port": config("SMTP_PORT", default=465, cast=int),
        "user": config("SMTP_USER", default=""),
        "password": config("SMTP_PASS", default=""),
    }


def _app_url():
    return config("APP_URL", default=APP_URL_DEFAULT)


def smtp_configured():
    s = _smtp_settings()
    return bool(s["host"] and s["user"] and s["password"])


def open_smtp_connection(settings):
    # 465 is implicit TLS; anything else (587, 25) upgrades with STARTTLS
    if settings["port"] == 465:
        smtp = smtplib.SMTP_SSL(host=settings["host"], port=settings["port"], timeout=30)
    else:
        smtp = smtplib.SMTP(host=settings["host"], port=settings["port"], timeout=30)
        smtp.starttls()
    smtp.login(settings["user"], settings["password"])
    return smtp


def build_message(sender_name, sender, to, subject, html_body, text_body=None):
    msg = MIMEMultipart("alternative")
    msg["From"] = formataddr((sender_name, sender))
    msg["To"] = to
    msg["Subject"] = subject
    msg["Message-ID"] = make_msgid(domain=sender.split("@")[-1] if "@" in sender else None)
    if text_body:
        msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))
    return msg


def send_email(to, subject, html_body, text_body=None, sender_name="DevForge"):
    """
    Send one message over SMTP. Never raises: callers get
    {"success": True, "messageId": ...} or {"success": False, "error": ...}.
    """
    settings = _smtp_settings()
    if not smtp_configured():
        error(logger, SMTP_NOT_CONFIGURED)
        return {"success": False, "error": SMTP_NOT_CONFIGURED}

    msg = build_message(sender_name, settings["user"], to, subject, html_body, text_body)
    try:
        smtp = open_smtp_connection(settings)
        try:
            smtp.send_message(msg)
        finally:
            smtp.quit()
    except (smtplib.SMTPException, OSError) as e:
        error(logger, "Error sending email", to=to, subject=subject, error=str(e))
        return {"success": False, "error": str(e)}

    info(logger, "Email sent", to=to, subject=subject, message_id=msg["Message-ID"])
    return {"success": True, "messageId": msg["Message-ID"]}


def send_credentials_email(to, name, username, password):
    values = {
        "name": html.escape(name or "Member"),
        "username": html.escape(username),
        "password": html.escape(password),
        "app_url": _app_url(),
        "year": datetime.now().year,
    }
    text_values = dict(values, name=name or "Member", username=username, password=password)
    return send_email(
        to=to,
        subject=CREDENTIALS_SUBJECT,
        html_body=CREDENTIALS_HTML.substitute(values),
        text_body=CREDENTIALS_TEXT.substitute(text_values),
    )


@sleep_and_retry
@limits(calls=30, period=60)
def _rate_limited_credentials_email(member):
    return send_credentials_email(
        to=member["email"],
        name=member.get("name"),
        username=member["username"],
        password=member["password"],
    )


def send_bulk_credentials_emails(members, delay=BULK_SEND_DELAY_SECONDS):
    """Sequential sends with a pause between messages to stay under provider limits"""
    results = []
    for index, member in enumerate(members):
        result = _rate_limited_credentials_email(member)
        results.append({"email": member["email"], "name": member.get("name"), **result})
        if delay and index < len(members) - 1:
            time.sleep(delay)

    sent = len([r for r in results if r["success"]])
    info(logger, "Bulk credentials emails finished", sent=sent, total=len(results))
    return results


def send_hackathon_registration_email(to, name, registration_type, team_name=None, member_count=1):
    if registration_type == "team":
        details = (f"<strong>Team Name:</strong> {html.escape(team_name or '')}<br>"
                   f"<strong>Team Size:</strong> {member_count} members")
        details_text = f"Team Name: {team_name}\nTeam Size: {member_count} members"
    else:
        details = "<strong>Registration Type:</strong> Individual"
        details_text = "Registration Type: Individual"

    values = {"name": html.escape(name), "details": details, "year": datetime.now().year}
    return send_email(
        to=to,
        subject=REGISTRATION_SUBJECT,
        html_body=REGISTRATION_HTML.substitute(values),
        text_body=REGISTRATION_TEXT.substitute(name=name, details_text=details_text),
        sender_name="DevForge Hackathon",
    )


def send_member_removal_email(to, name):
    if not to:
        warning(logger, "No email address for removal notice", name=name)
        return {"success": False, "error": "No email address"}
    return send_email(
        to=to,
        subject=REMOVAL_SUBJECT,
        html_body=REMOVAL_HTML.substitute(name=html.escape(name or "there"), app_url=_app_url()),
        sender_name="CODE 4O4",
    )
