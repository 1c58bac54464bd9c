import re
import secrets
import string
import time

SPECIAL_CHARS = "@!#$&"
BASE36 = string.digits + string.ascii_lowercase


def _first_name(name):
    return (name or "").strip().split(" ")[0]


def _alnum(value):
    return re.sub(r"[^a-z0-9]", "", value.lower())


def generate_username(name):
    """First name, lower-cased, alphanumerics only"""
    username = _alnum(_first_name(name))
    return username or "member"


def generate_password(name):
    """
    Memorable password built from the member's name, e.g. ``alex@4821``,
    ``alex4821!``, ``alex_4821`` or ``alexJ4821``.
    """
    parts = (name or "").strip().split()
    first = _alnum(parts[0] if parts else "") or "member"
    number = 1000 + secrets.randbelow(9000)
    special = secrets.choice(SPECIAL_CHARS)

    pattern = secrets.randbelow(4)
    if pattern == 0:
        return f"{first}{special}{number}"
    if pattern == 1:
        return f"{first}{number}{special}"
    if pattern == 2:
        return f"{first}_{number}"
    last_name = _alnum(parts[1]) if len(parts) > 1 else ""
    last_initial = last_name[:1].upper()
    return f"{first}{last_initial}{number}"


def generate_member_id():
    suffix = "".join(secrets.choice(BASE36) for _ in range(9))
    return f"user-{int(time.time() * 1000)}-{suffix}"


def dicebear_avatar(seed):
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"
