from datetime import datetime
from unittest.mock import patch

import pytest
import pytz

from api.hackathon.hackathon_service import (
    REGISTRATIONS_COLLECTION,
    export_registrations_csv,
    import_registrations_csv,
    list_registrations,
    register,
    send_confirmation,
)
from common.exceptions import ValidationError

MEMBER = {"name": "Asha Rao", "email": "Asha@Example.com", "phone": "9876543210", "gender": "female"}


@pytest.fixture(autouse=True)
def no_side_effects():
    with patch("api.hackathon.hackathon_service.send_slack_audit"), \
            patch("api.hackathon.hackathon_service.send_hackathon_registration_email") as mock_email:
        mock_email.return_value = {"success": True, "messageId": "1"}
        yield mock_email


class TestRegister:
    def test_individual(self, db, no_side_effects):
        result = register({"type": "individual", "members": [MEMBER]})

        stored = db.collection(REGISTRATIONS_COLLECTION).document(result["id"]).get().to_dict()
        assert stored["type"] == "individual"
        assert stored["members"][0]["email"] == "asha@example.com"
        assert "teamName" not in stored
        assert no_side_effects.call_args.kwargs["to"] == "asha@example.com"

    def test_team_needs_name_and_two_members(self):
        with pytest.raises(ValidationError):
            register({"type": "team", "teamName": "Nulls", "members": [MEMBER]})
        with pytest.raises(ValidationError):
            register({"type": "team", "members": [MEMBER, MEMBER]})

    def test_team(self, no_side_effects):
        register({"type": "team", "teamName": "Nulls", "members": [MEMBER, dict(MEMBER, email="b@x.co")]})
        kwargs = no_side_effects.call_args.kwargs
        assert kwargs["team_name"] == "Nulls"
        assert kwargs["member_count"] == 2

    @pytest.mark.parametrize("member", [
        dict(MEMBER, name="A"),
        dict(MEMBER, email="nope"),
        dict(MEMBER, phone="12345"),
        dict(MEMBER, gender="robot"),
    ])
    def test_member_validation(self, member):
        with pytest.raises(ValidationError):
            register({"type": "individual", "members": [member]})

    def test_too_many_members(self):
        with pytest.raises(ValidationError):
            register({"type": "team", "teamName": "Big", "members": [MEMBER] * 5})

    def test_email_failure_keeps_registration(self, db, no_side_effects):
        no_side_effects.return_value = {"success": False, "error": "smtp down"}

        result = register({"type": "individual", "members": [MEMBER]})

        assert result["emailSent"] is False
        assert db.collection(REGISTRATIONS_COLLECTION).document(result["id"]).get().exists

    @patch("api.hackathon.hackathon_service.send_to_subscriptions")
    @patch("api.hackathon.hackathon_service.list_all_subscriptions")
    def test_push_to_registrant(self, mock_list, mock_send):
        mock_list.return_value = [{"id": "s1", "userId": "m1", "subscription": {"endpoint": "e"}},
                                  {"id": "s2", "userId": "m2", "subscription": {"endpoint": "f"}}]

        register({"type": "individual", "members": [MEMBER], "userId": "m1"})

        subscriptions, payload = mock_send.call_args[0]
        assert [s["id"] for s in subscriptions] == ["s1"]
        assert payload["body"].startswith("Welcome Asha Rao!")


class TestSendConfirmation:
    @pytest.mark.parametrize("body", [
        {"email": "a@b.co", "name": "A", "type": "individual"},
        {"email": "a@b.co", "name": "A", "type": "duo", "memberCount": 2},
        {"email": "a@b.co", "name": "A", "type": "team", "memberCount": 2},
    ])
    def test_validation(self, body):
        with pytest.raises(ValidationError):
            send_confirmation(body)

    def test_sends(self, no_side_effects):
        result = send_confirmation({"email": "a@b.co", "name": "A", "type": "team", "teamName": "T", "memberCount": 3})
        assert result["success"] is True


class TestCsv:
    def test_export_one_row_per_member(self, db):
        db.collection(REGISTRATIONS_COLLECTION).document("r1").set({
            "type": "team",
            "teamName": "Nulls",
            "members": [{"name": "Rao, Asha", "email": "a@x.co"}, {"name": "Ravi", "email": "r@x.co"}],
            "createdAt": datetime(2025, 11, 1, tzinfo=pytz.utc),
        })

        lines = export_registrations_csv().strip().splitlines()

        assert lines[0].startswith("ID,Type,Team Name,Member Name")
        assert len(lines) == 3
        assert lines[1].startswith('r1,team,Nulls,"Rao, Asha",a@x.co')
        assert lines[1].endswith("2025-11-01T00:00:00+00:00")

    def test_import(self, db):
        text = "Type,TeamName,Name,Email,Phone,Gender,Github,Portfolio\n" \
               "Team,Nulls,Asha,ASHA@x.co,9876543210,Female,,\n" \
               "individual,,Ravi,r@x.co\n" \
               "short,row\n" \
               "\n"

        assert import_registrations_csv(text) == 2
        registrations = {r["members"][0]["name"]: r for r in list_registrations()}
        assert registrations["Asha"]["type"] == "team"
        assert registrations["Asha"]["members"][0]["email"] == "asha@x.co"
        assert registrations["Asha"]["members"][0]["gender"] == "female"
        assert registrations["Ravi"]["members"][0]["gender"] == "other"

    def test_import_empty_body(self):
        with pytest.raises(ValidationError):
            import_registrations_csv("  ")
