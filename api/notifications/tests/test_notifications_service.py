from datetime import datetime, timedelta

import pytest
import pytz

from api.notifications.notifications_service import NOTIFICATIONS_COLLECTION, list_notifications, mark_read
from common.exceptions import MissingFieldError, ValidationError

NOW = datetime(2025, 12, 20, tzinfo=pytz.utc)


@pytest.fixture
def inbox(db):
    collection = db.collection(NOTIFICATIONS_COLLECTION)
    for i in range(3):
        collection.document(f"n{i}").set({"userId": "m1", "title": f"T{i}", "read": i == 0,
                                          "createdAt": NOW + timedelta(minutes=i)})
    collection.document("other").set({"userId": "m2", "title": "Other", "read": False, "createdAt": NOW})
    return collection


def test_list_newest_first_with_unread_count(inbox):
    result = list_notifications("m1")
    assert [n["id"] for n in result["notifications"]] == ["n2", "n1", "n0"]
    assert result["unreadCount"] == 2


def test_list_limit(inbox):
    assert [n["id"] for n in list_notifications("m1", limit=1)["notifications"]] == ["n2"]


def test_list_requires_user():
    with pytest.raises(MissingFieldError):
        list_notifications(None)


def test_list_rejects_non_numeric_limit(inbox):
    with pytest.raises(ValidationError):
        list_notifications("m1", limit="abc")


def test_list_endpoint_bad_limit_is_400(client, inbox):
    response = client.get("/api/notifications?userId=m1&limit=abc")
    assert response.status_code == 400
    assert response.get_json() == {"ok": False, "message": "limit must be a number"}


def test_mark_all(inbox):
    assert mark_read("m1", mark_all=True) == 2
    assert inbox.document("other").get().to_dict()["read"] is False


def test_mark_ids_ignores_other_users(inbox):
    assert mark_read("m1", notification_ids=["n1", "other", "missing"]) == 1
    assert inbox.document("n1").get().to_dict()["read"] is True
    assert inbox.document("other").get().to_dict()["read"] is False
