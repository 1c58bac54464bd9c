import re
from urllib.parse import urlparse
import logging

from common.exceptions import InvalidEmailError, InvalidURLError, MissingFieldError, ValidationError

logger = logging.getLogger(__name__)

# Pragmatic check: one @, no whitespace, a dot in the domain part
EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_email(email):
    """
    Validate an email address.

    Args:
    email (str): The email address to validate.

    Returns:
    bool: True if the email is valid, False otherwise.
    """
    if not isinstance(email, str):
        logger.warning(f"Invalid email type: {type(email)}")
        return False

    if not email or len(email) > 254:
        return False

    return EMAIL_REGEX.match(email) is not None


def validate_url(url):
    """
    Validate an absolute http(s) URL.

    Args:
    url (str): The URL to validate.

    Returns:
    bool: True if the URL is valid, False otherwise.
    """
    if not isinstance(url, str):
        logger.warning(f"Invalid URL type: {type(url)}")
        return False

    try:
        result = urlparse(url)
        return result.scheme in ("http", "https") and bool(result.netloc)
    except ValueError:
        logger.warning(f"Invalid URL format: {url}")
        return False


def sanitize_string(input_string, max_length=None):
    """
    Trim whitespace and optionally truncate.

    Non-strings come back as "" so callers can treat absent and blank alike.
    """
    if not isinstance(input_string, str):
        return ""

    sanitized = input_string.strip()

    if max_length is not None and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
        logger.info(f"String truncated to {max_length} characters")

    return sanitized


def require_fields(data, *fields):
    """Raise MissingFieldError for the first field that is absent or blank"""
    for field in fields:
        value = data.get(field) if data else None
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingFieldError(field)


def require_email(email):
    if not validate_email(email):
        raise InvalidEmailError(email)
    return email.strip().lower()


def optional_url(url):
    """Empty values pass through as None; anything else must be a valid URL"""
    if url is None or (isinstance(url, str) and not url.strip()):
        return None
    if not validate_url(url.strip()):
        raise InvalidURLError(url)
    return url.strip()


def require_choice(value, choices, field_name):
    if value not in choices:
        raise ValidationError(f"{field_name} must be one of: {', '.join(choices)}")
    return value
