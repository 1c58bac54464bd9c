import json
import os
from datetime import datetime, date

import firebase_admin
import pytz
from firebase_admin import credentials, firestore
from mockfirestore import MockFirestore

from common.log import get_logger, info, debug, error
from common.utils import safe_get_env_var

logger = get_logger("db")

# Add a singleton client
_firestore_client = None


def _load_credentials():
    """
    Service account from FIREBASE_CERT_CONFIG (JSON string), or from the
    individual FIREBASE_PROJECT_ID / FIREBASE_CLIENT_EMAIL / FIREBASE_PRIVATE_KEY
    variables as deployed on the hosting platform.
    """
    cert_config = os.environ.get("FIREBASE_CERT_CONFIG")
    if cert_config:
        return credentials.Certificate(json.loads(cert_config))

    project_id = os.environ.get("FIREBASE_PROJECT_ID")
    client_email = os.environ.get("FIREBASE_CLIENT_EMAIL")
    private_key = os.environ.get("FIREBASE_PRIVATE_KEY")
    if project_id and client_email and private_key:
        return credentials.Certificate({
            "type": "service_account",
            "project_id": project_id,
            "client_email": client_email,
            # Escaped newlines survive most env var editors
            "private_key": private_key.replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        })

    error(logger, "No Firebase credentials found in environment variables")
    raise RuntimeError("Missing Firebase service account credentials")


def get_firebase_app():
    if not firebase_admin._apps:
        firebase_admin.initialize_app(credential=_load_credentials())
        info(logger, "Initialized Firebase Admin SDK")
    return firebase_admin.get_app()


def is_test_environment():
    return safe_get_env_var("ENVIRONMENT") == "test"


def get_db():
    """
    Returns a singleton Firestore client, or a MockFirestore when
    ENVIRONMENT=test.
    """
    global _firestore_client

    if _firestore_client is None:
        if is_test_environment():
            _firestore_client = MockFirestore()
            debug(logger, "Created MockFirestore client")
        else:
            get_firebase_app()
            _firestore_client = firestore.client()
            debug(logger, "Created Firestore client")

    return _firestore_client


def reset_db():
    """Drop the cached client; tests use this to start from an empty store"""
    global _firestore_client
    if _firestore_client is not None and hasattr(_firestore_client, "reset"):
        _firestore_client.reset()
    _firestore_client = None


EPOCH = datetime(1970, 1, 1, tzinfo=pytz.utc)


def now():
    return datetime.now(pytz.utc)


def doc_to_dict(doc):
    """Snapshot -> dict with the document id under "id" (stored id wins)"""
    d = doc.to_dict() or {}
    d.setdefault("id", doc.id)
    return d


def to_datetime(value):
    """
    Best effort conversion of the timestamp shapes found in our collections:
    Firestore timestamps, datetimes, ISO strings, {"seconds": ...} maps and
    epoch milliseconds. Returns an aware UTC datetime or None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else pytz.utc.localize(value)
    if isinstance(value, date):
        return pytz.utc.localize(datetime(value.year, value.month, value.day))
    if isinstance(value, dict) and "seconds" in value:
        return datetime.fromtimestamp(value["seconds"], tz=pytz.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=pytz.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else pytz.utc.localize(parsed)
    return None


def serialize_value(value):
    """Make Firestore values JSON friendly for Flask responses"""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value
