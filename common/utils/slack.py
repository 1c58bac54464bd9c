import requests
from . import safe_get_env_var, is_configured
from slack_sdk import WebClient
from slack_sdk.models.blocks import SectionBlock
from slack_sdk.errors import SlackApiError
from dotenv import load_dotenv
from requests.exceptions import RequestException
from cachetools import TTLCache, cached
from ratelimit import limits, sleep_and_retry

load_dotenv()

SLACK_URL = safe_get_env_var("SLACK_WEBHOOK")
DEFAULT_USERNAME = "CODE 4O4 Bot"
DEFAULT_ICON_URL = "https://code404.dev/app-icon-192.png"

# add logger
import logging
logger = logging.getLogger(__name__)
logger.addHandler(logging.StreamHandler())
logger.setLevel(logging.INFO)

# Keys that must never be echoed into the audit channel
AUDIT_REDACTED_KEYS = ("password", "recaptchaToken", "credentials")


def send_slack_audit(action="", message="", payload=None):
    if not is_configured(SLACK_URL):
        logger.warning("SLACK_WEBHOOK not set, returning")
        return

    json = {
        "text": f"[{action}] {message}"
    }

    if payload:
        # Create a copy to avoid mutating the original payload
        payload_copy = {k: v for k, v in payload.items() if k not in AUDIT_REDACTED_KEYS}
        json = {
            "text": f"[{action}] {message}\n{payload_copy}"
        }

    try:
        requests.post(json=json, url=SLACK_URL, timeout=10)
    except RequestException as e:
        # The request from the frontend should not fail if we can't contact slack
        logger.warning(f"Unable to post Slack audit message: {e}")


def get_slack_token():
    slack_token = safe_get_env_var("SLACK_BOT_TOKEN")
    if not is_configured(slack_token):
        logger.warning("SLACK_BOT_TOKEN not set, returning")
        return None
    return slack_token


def get_client():
    return WebClient(token=get_slack_token())


def normalize_channel_name(channel):
    return (channel or "").strip().lstrip("#")


@cached(cache=TTLCache(maxsize=100, ttl=300))
@sleep_and_retry
@limits(calls=20, period=60)
def get_channel_id_from_channel_name(channel_name):
    """
    Channel id for a channel name, or None when the bot cannot see it.
    Pages through conversations_list.
    """
    client = get_client()
    logger.info(f"Looking for slack channel {channel_name}...")

    try:
        cursor = None
        while True:
            result = client.conversations_list(
                exclude_archived=True,
                limit=1000,
                cursor=cursor,
                types="private_channel,public_channel"
            )

            for channel in result["channels"]:
                if channel["name"] == channel_name:
                    logger.info(f"Found Channel! {channel_name} -> {channel['id']}")
                    return channel["id"]

            cursor = result.get("response_metadata", {}).get("next_cursor")
            if not cursor:
                break

        logger.warning(f"Channel {channel_name} not found")
        return None

    except SlackApiError as e:
        logger.error(f"Error fetching channels: {e}")
        return None


def send_slack(message="", channel="", icon_emoji=None, username=DEFAULT_USERNAME):
    """
    Post a mrkdwn message with the bot token. `channel` may be a channel
    name, a channel id or a user id. Returns True when Slack accepted it.
    """
    channel = normalize_channel_name(channel)
    client = get_client()
    channel_id = get_channel_id_from_channel_name(channel)

    if channel_id is None:
        logger.warning("Unable to get channel id from name, might be a user?")
        channel_id = channel

    kwargs = {
        "channel": channel_id,
        "text": message,
        "blocks": [
            SectionBlock(
                text={
                    "type": "mrkdwn",
                    "text": message
                }
            )
        ],
        "username": username
    }

    if icon_emoji:
        kwargs["icon_emoji"] = icon_emoji
    else:
        kwargs["icon_url"] = DEFAULT_ICON_URL

    try:
        client.chat_postMessage(**kwargs)
        return True
    except SlackApiError as e:
        logger.error(f"Slack rejected message for {channel}: {e.response['error']}")
        return False
