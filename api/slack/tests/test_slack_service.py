from unittest.mock import patch

import pytest

from api.slack.slack_service import format_announcement, notify, resolve_channels
from common.exceptions import ValidationError


class TestSlackService:
    def test_format_with_ping_and_link(self):
        text = format_announcement("Demo Day", "Friday 6pm", url="https://code404.dev/events", ping="here")
        assert text == "<!here>\n*Demo Day*\nFriday 6pm\n<https://code404.dev/events|Open link>"

    def test_default_channel(self, monkeypatch):
        monkeypatch.delenv("SLACK_DEFAULT_CHANNEL", raising=False)
        assert resolve_channels({}) == ["dev-club"]
        monkeypatch.setenv("SLACK_DEFAULT_CHANNEL", "announcements")
        assert resolve_channels({}) == ["announcements"]

    def test_channels_list_or_comma_string(self):
        assert resolve_channels({"channels": "#general, C123 ,"}) == ["general", "C123"]
        assert resolve_channels({"channel": "#random"}) == ["random"]

    @patch("api.slack.slack_service.send_slack")
    def test_notify_fans_out(self, mock_send):
        mock_send.side_effect = [True, False]

        result = notify({"title": "T", "body": "B", "channels": ["a", "b"]})

        assert result["ok"] is False
        assert result["results"] == [{"channel": "a", "ok": True}, {"channel": "b", "ok": False}]
        assert mock_send.call_count == 2

    @pytest.mark.parametrize("body", [
        {"title": "", "body": "B"},
        {"title": "T", "body": ""},
        {"title": "T", "body": "B", "ping": "everyone"},
    ])
    def test_notify_validation(self, body):
        with pytest.raises(ValidationError):
            notify(body)
