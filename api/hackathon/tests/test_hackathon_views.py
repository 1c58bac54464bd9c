from unittest.mock import patch

import pytest

SECRET_HEADERS = {"x-webpush-secret": "cron-secret"}


@pytest.fixture(autouse=True)
def secrets_env(monkeypatch):
    monkeypatch.setenv("WEBPUSH_SEND_SECRET", "cron-secret")
    monkeypatch.setenv("HACKATHON_ADMIN_CODE", "devforge")


def test_schedule_requires_auth(client):
    assert client.post("/api/hackathon/schedule-notifications").status_code == 401


def test_wrong_secret_rejected(client):
    response = client.post("/api/hackathon/schedule-notifications", headers={"x-webpush-secret": "nope"})
    assert response.status_code == 401


@patch("api.hackathon.hackathon_views.schedule_hackathon_notifications")
def test_dry_run_via_query(mock_schedule, client):
    mock_schedule.return_value = {"dryRun": True}

    response = client.post("/api/hackathon/schedule-notifications?dryRun=true", headers=SECRET_HEADERS)

    assert response.status_code == 200
    mock_schedule.assert_called_once_with(dry_run=True)


@patch("api.hackathon.hackathon_views.clear_hackathon_notifications", return_value=3)
def test_mentor_cookie_can_clear(mock_clear, client):
    client.set_cookie("code404-user", "%7B%22id%22%3A%22m1%22%2C%22role%22%3A%22mentor%22%7D")

    response = client.delete("/api/hackathon/schedule-notifications")

    assert response.status_code == 200
    assert response.get_json()["deleted"] == 3


def test_registrations_need_admin_code(client):
    assert client.get("/api/hackathon/registrations").status_code == 401
    assert client.get("/api/hackathon/registrations", headers={"x-admin-code": "devforge"}).status_code == 200


def test_export_is_csv(client):
    response = client.get("/api/hackathon/registrations/export", headers={"x-admin-code": "devforge"})
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert response.get_data(as_text=True).startswith("ID,Type")


def test_register_validation_error(client):
    response = client.post("/api/hackathon/register", json={"type": "individual", "members": []})
    assert response.status_code == 400
    assert response.get_json()["success"] is False


@patch("api.hackathon.hackathon_views.send_confirmation")
def test_send_confirmation_failure_is_500(mock_send, client):
    mock_send.return_value = {"success": False, "error": "smtp down"}
    response = client.post("/api/hackathon/send-confirmation", json={})
    assert response.status_code == 500
    assert response.get_json()["error"] == "smtp down"
