from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
import pytz

from api.projects.projects_service import (
    DECISIONS_COLLECTION,
    INTERESTS_COLLECTION,
    MEMBERS_COLLECTION,
    PROJECT_MEMBERS_COLLECTION,
    PROJECTS_COLLECTION,
    build_activity_feed,
    create_interest,
    create_project,
    decide_interest,
    get_project,
    get_project_detail,
    list_interests,
    remove_project_member,
    update_project,
)
from common.exceptions import DuplicateEntryError, NotFoundError, ValidationError

NOW = datetime(2025, 11, 1, 12, 0, tzinfo=pytz.utc)


@pytest.fixture(autouse=True)
def no_slack():
    with patch("api.projects.projects_service.send_slack_audit"):
        yield


def _project(db, project_id="proj-1", **overrides):
    data = {"title": "Campus Map", "description": "Maps", "tech": ["React"], "status": "active",
            "createdAt": NOW, "updatedAt": NOW}
    data.update(overrides)
    db.collection(PROJECTS_COLLECTION).document(project_id).set(data)
    return project_id


class TestProjects:
    def test_create_adds_owner_membership(self, db):
        project = create_project({
            "title": "Campus Map",
            "description": "Interactive map",
            "tech": ["React", " "],
            "owner": "Asha",
            "ownerId": "m1",
        })

        assert project["status"] == "recruiting"
        assert project["tech"] == ["React"]
        memberships = [d.to_dict() for d in db.collection(PROJECT_MEMBERS_COLLECTION).stream()]
        assert memberships[0]["role"] == "owner"
        assert memberships[0]["projectId"] == project["id"]

    def test_create_requires_tech(self):
        with pytest.raises(ValidationError):
            create_project({"title": "T", "description": "D", "tech": []})

    def test_create_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            create_project({"title": "T", "description": "D", "tech": ["Go"], "status": "paused"})

    def test_get_missing_project(self):
        with pytest.raises(NotFoundError):
            get_project("nope")

    def test_update_only_allowed_fields(self, db):
        _project(db)

        result = update_project("proj-1", {"title": "New", "ownerId": "hacker", "latestUpdate": "Shipped v1"})

        stored = db.collection(PROJECTS_COLLECTION).document("proj-1").get().to_dict()
        assert stored["title"] == "New"
        assert "ownerId" not in stored
        assert stored["latestUpdate"] == "Shipped v1"
        assert "updatedAt" in result

    def test_update_missing_project(self):
        with pytest.raises(NotFoundError):
            update_project("nope", {"title": "x"})


class TestActivityFeed:
    def test_newest_first_and_limited(self):
        members = [{"id": f"m{i}", "userName": f"U{i}", "role": "member", "joinedAt": NOW - timedelta(days=i)}
                   for i in range(1, 6)]
        feed = build_activity_feed({"status": "active", "updatedAt": NOW}, members, [])

        assert len(feed) == 5
        assert feed[0]["id"] == "project-updated"
        assert feed[0]["description"] == "Status changed to Active"
        assert [e["id"] for e in feed[1:]] == ["member-m1", "member-m2", "member-m3", "member-m4"]

    def test_entries_without_timestamps_are_dropped(self):
        feed = build_activity_feed(
            {"status": "completed", "latestUpdate": "v1 is live", "createdAt": NOW},
            [{"id": "m1", "userName": "A"}],
            [{"id": "r1", "userName": "B", "interests": ["AI", "Web", "Design"], "requestedAt": NOW - timedelta(hours=1)}],
        )

        assert [e["id"] for e in feed] == ["project-updated", "request-r1"]
        assert feed[0]["title"] == "Project shipped"
        assert feed[0]["description"] == "v1 is live"
        assert feed[1]["description"] == "Focus: AI, Web"

    def test_detail(self, db):
        _project(db)
        db.collection(PROJECT_MEMBERS_COLLECTION).add({"projectId": "proj-1", "userName": "A", "joinedAt": NOW})
        db.collection(INTERESTS_COLLECTION).add({"projectId": "other", "userName": "B", "createdAt": NOW})

        detail = get_project_detail("proj-1")

        assert detail["project"]["id"] == "proj-1"
        assert len(detail["members"]) == 1
        assert detail["pendingRequests"] == []
        assert len(detail["activities"]) == 2


class TestInterests:
    def test_list_enriches_names(self, db):
        _project(db)
        db.collection(MEMBERS_COLLECTION).document("m1").set({"name": "Asha", "email": "a@x.co"})
        db.collection(INTERESTS_COLLECTION).document("i1").set({"projectId": "proj-1", "userId": "m1", "status": "pending"})
        db.collection(INTERESTS_COLLECTION).document("i2").set({"projectId": "ghost", "userId": "m9", "status": "pending"})

        interests = {i["id"]: i for i in list_interests(status="pending")}

        assert interests["i1"]["projectName"] == "Campus Map"
        assert interests["i1"]["userEmail"] == "a@x.co"
        assert interests["i2"]["projectName"] == "ghost"
        assert interests["i2"]["userName"] == "m9"

    def test_list_falls_back_to_stored_id_field(self, db):
        db.collection(MEMBERS_COLLECTION).document("auto-id").set({"id": "user-1", "name": "Ravi"})
        db.collection(INTERESTS_COLLECTION).document("i1").set({"projectId": "p", "userId": "user-1"})

        assert list_interests()[0]["userName"] == "Ravi"

    def test_create_and_reject_duplicate(self, db):
        _project(db)
        create_interest({"projectId": "proj-1", "userId": "m1"})
        with pytest.raises(DuplicateEntryError):
            create_interest({"projectId": "proj-1", "userId": "m1"})

    def test_create_for_unknown_project(self):
        with pytest.raises(NotFoundError):
            create_interest({"projectId": "nope", "userId": "m1"})

    def test_approve_adds_member_and_points(self, db):
        db.collection(MEMBERS_COLLECTION).document("m1").set({"name": "Asha", "email": "a@x.co", "points": 5})
        db.collection(INTERESTS_COLLECTION).document("i1").set({"projectId": "proj-1", "userId": "m1", "status": "pending"})

        result = decide_interest({"interestId": "i1", "status": "approved", "ownerId": "owner-1"})

        assert result == {"ok": True, "message": "Request approved!",
                          "data": {"id": "i1", "status": "approved", "deleted": True}}
        membership = [d.to_dict() for d in db.collection(PROJECT_MEMBERS_COLLECTION).stream()][0]
        assert membership["role"] == "member"
        assert membership["userName"] == "Asha"
        assert membership["addedBy"] == "owner-1"
        assert db.collection(MEMBERS_COLLECTION).document("m1").get().to_dict()["points"] == 15
        assert not db.collection(INTERESTS_COLLECTION).document("i1").get().exists
        decision = [d.to_dict() for d in db.collection(DECISIONS_COLLECTION).stream()][0]
        assert decision["type"] == "project_interest"
        assert decision["decidedBy"] == "owner-1"

    def test_reject_adds_no_member(self, db):
        db.collection(INTERESTS_COLLECTION).document("i1").set({"projectId": "proj-1", "userId": "m1"})

        decide_interest({"interestId": "i1", "status": "rejected"})

        assert list(db.collection(PROJECT_MEMBERS_COLLECTION).stream()) == []
        assert len(list(db.collection(DECISIONS_COLLECTION).stream())) == 1

    def test_decide_validation(self):
        with pytest.raises(ValidationError):
            decide_interest({"interestId": "i1"})
        with pytest.raises(NotFoundError):
            decide_interest({"interestId": "missing", "status": "approved"})

    def test_owner_cannot_be_removed(self, db):
        db.collection(PROJECT_MEMBERS_COLLECTION).document("pm1").set({"projectId": "p", "role": "owner"})
        with pytest.raises(ValidationError):
            remove_project_member("pm1")
