from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
import pytz
from google.api_core.exceptions import FailedPrecondition

from api.webpush.webpush_service import (
    NOTIFICATIONS_COLLECTION,
    get_due_schedules,
    process_due_schedules,
    schedule_notification,
    subscribe,
    unsubscribe,
)
from common.exceptions import ValidationError
from common.utils.webpush import SUBSCRIPTIONS_COLLECTION, save_subscription
from services.hackathon_notifications import SCHEDULES_COLLECTION

NOW = datetime(2025, 12, 20, 4, 0, tzinfo=pytz.utc)


def _schedule(db, doc_id, send_at, status="pending", audience="subscribed", payload=None):
    db.collection(SCHEDULES_COLLECTION).document(doc_id).set({
        "sendAt": send_at,
        "status": status,
        "audience": audience,
        "payload": payload or {"title": "Lunch", "body": "Food", "tag": "hackathon-lunch",
                               "data": {"url": "/hackathon"}},
        "meta": {"type": "lunch-break"},
    })


def _snapshot(doc_id, data):
    doc = MagicMock()
    doc.id = doc_id
    doc.to_dict.return_value = data
    return doc


class TestSubscriptions:
    def test_subscribe_requires_endpoint_or_token(self):
        with pytest.raises(ValidationError):
            subscribe({"subscription": {}})

    def test_subscribe_and_unsubscribe(self, db):
        result = subscribe({"subscription": {"endpoint": "https://push/1"}, "userId": "m1"})
        assert db.collection(SUBSCRIPTIONS_COLLECTION).document(result["id"]).get().exists

        unsubscribe({"subscription": {"endpoint": "https://push/1"}})
        assert not db.collection(SUBSCRIPTIONS_COLLECTION).document(result["id"]).get().exists

    def test_unsubscribe_requires_endpoint(self):
        with pytest.raises(ValidationError):
            unsubscribe({})


class TestSchedule:
    def test_schedule_ad_hoc(self, db):
        result = schedule_notification({"sendAt": "2025-12-20T10:00:00Z", "payload": {"title": "Hi"}})

        stored = db.collection(SCHEDULES_COLLECTION).document(result["id"]).get().to_dict()
        assert stored["status"] == "pending"
        assert stored["audience"] == "subscribed"
        assert stored["payload"]["icon"] == "/app-icon-192.png"

    def test_schedule_requires_send_at(self):
        with pytest.raises(ValidationError):
            schedule_notification({"sendAt": "tomorrow"})


class TestDueSchedules:
    def test_only_pending_and_due(self, db):
        _schedule(db, "due", NOW - timedelta(minutes=1))
        _schedule(db, "later", NOW + timedelta(minutes=1))
        _schedule(db, "done", NOW - timedelta(hours=1), status="sent")

        assert [d.id for d in get_due_schedules(NOW)] == ["due"]

    @patch("api.webpush.webpush_service.get_db")
    def test_falls_back_without_composite_index(self, mock_get_db):
        by_status = mock_get_db.return_value.collection.return_value.where.return_value
        by_status.where.return_value.stream.side_effect = FailedPrecondition("The query requires an index.")
        by_status.stream.return_value = [
            _snapshot("due", {"sendAt": NOW - timedelta(minutes=5)}),
            _snapshot("later", {"sendAt": NOW + timedelta(minutes=5)}),
            _snapshot("iso", {"sendAt": "2025-12-20T03:00:00Z"}),
        ]

        assert [d.id for d in get_due_schedules(NOW)] == ["due", "iso"]

    @patch("api.webpush.webpush_service.get_db")
    def test_other_precondition_errors_propagate(self, mock_get_db):
        by_status = mock_get_db.return_value.collection.return_value.where.return_value
        by_status.where.return_value.stream.side_effect = FailedPrecondition("something else")

        with pytest.raises(FailedPrecondition):
            get_due_schedules(NOW)


class TestProcessSchedules:
    @patch("common.utils.webpush.deliver")
    def test_sends_and_records_notifications(self, mock_deliver, db):
        mock_deliver.return_value = {"success": True, "error": None}
        save_subscription(subscription={"endpoint": "https://push/1"}, user_id="m1")
        save_subscription(subscription={"endpoint": "https://push/2"}, user_id="m1")
        save_subscription(subscription={"endpoint": "https://push/3"})
        _schedule(db, "s1", NOW - timedelta(minutes=1))

        result = process_due_schedules(NOW)

        assert result["processed"][0]["status"] == "sent"
        assert mock_deliver.call_count == 3
        stored = db.collection(SCHEDULES_COLLECTION).document("s1").get().to_dict()
        assert stored["status"] == "sent"
        assert len(stored["results"]) == 3
        # One inbox entry per distinct user
        notifications = [d.to_dict() for d in db.collection(NOTIFICATIONS_COLLECTION).stream()]
        assert len(notifications) == 1
        assert notifications[0]["userId"] == "m1"
        assert notifications[0]["url"] == "/hackathon"
        assert notifications[0]["source"] == "hackathon-lunch"
        assert notifications[0]["read"] is False

    @patch("api.webpush.webpush_service.send_to_subscriptions")
    def test_failure_marks_schedule_failed(self, mock_send, db):
        mock_send.side_effect = RuntimeError("push service down")
        _schedule(db, "s1", NOW - timedelta(minutes=1))

        result = process_due_schedules(NOW)

        assert result["processed"][0]["status"] == "failed"
        stored = db.collection(SCHEDULES_COLLECTION).document("s1").get().to_dict()
        assert stored["status"] == "failed"
        assert stored["error"] == "push service down"
        assert "triedAt" in stored

    @patch("common.utils.webpush.deliver")
    def test_user_audience(self, mock_deliver, db):
        mock_deliver.return_value = {"success": True, "error": None}
        save_subscription(subscription={"endpoint": "https://push/1"}, user_id="m1")
        save_subscription(subscription={"endpoint": "https://push/2"}, user_id="m2")
        _schedule(db, "s1", NOW - timedelta(minutes=1), audience={"userId": "m2"})

        process_due_schedules(NOW)

        assert mock_deliver.call_count == 1
        assert mock_deliver.call_args[0][0]["userId"] == "m2"

    def test_nothing_due(self, db):
        assert process_due_schedules(NOW) == {"processed": []}
