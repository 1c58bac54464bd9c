import os

from common.exceptions import ValidationError
from common.log import get_logger, info
from common.utils.slack import normalize_channel_name, send_slack

logger = get_logger("slack_service")

PINGS = {"here": "<!here>", "channel": "<!channel>"}


def get_default_channel():
    return os.environ.get("SLACK_DEFAULT_CHANNEL") or "dev-club"


def format_announcement(title, body, url=None, ping=None):
    lines = []
    if ping:
        lines.append(PINGS[ping])
    lines.append(f"*{title}*")
    lines.append(body)
    if url:
        lines.append(f"<{url}|Open link>")
    return "\n".join(lines)


def resolve_channels(body):
    if body.get("channels"):
        channels = body["channels"]
        if isinstance(channels, str):
            channels = channels.split(",")
    elif body.get("channel"):
        channels = [body["channel"]]
    else:
        channels = [get_default_channel()]
    resolved = [normalize_channel_name(c) for c in channels if normalize_channel_name(c)]
    return resolved or [get_default_channel()]


def notify(body):
    title = (body.get("title") or "").strip()
    message = (body.get("body") or "").strip()
    if not title or not message:
        raise ValidationError("Title and body are required")
    ping = body.get("ping") or None
    if ping is not None and ping not in PINGS:
        raise ValidationError("ping must be 'here' or 'channel'")

    text = format_announcement(title, message, body.get("url"), ping)
    results = []
    for channel in resolve_channels(body):
        results.append({"channel": channel, "ok": send_slack(message=text, channel=channel)})

    info(logger, "Sent Slack announcement", title=title, channels=[r["channel"] for r in results],
         delivered=len([r for r in results if r["ok"]]))
    return {"ok": all(r["ok"] for r in results), "channel": results[0]["channel"], "results": results}
