from os import environ

import logging
logger = logging.getLogger(__name__)
logger.addHandler(logging.StreamHandler())
logger.setLevel(logging.INFO)

PLACEHOLDER = "CHANGEMEPLS"


def safe_get_env_var(key):
    try:
        return environ[key]
    except KeyError:
        logger.warning(f"Missing {key} environment variable. Setting default to {PLACEHOLDER}")
        return PLACEHOLDER
        # ^^ Do this so any ENVs not set in production won't crash the server


def is_configured(value):
    """True when an env value read via safe_get_env_var was actually set"""
    return bool(value) and value != PLACEHOLDER
