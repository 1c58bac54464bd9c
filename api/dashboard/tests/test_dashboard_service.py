from datetime import date

from api.dashboard.dashboard_service import get_dashboard, get_user_projects


def _seed(db):
    db.collection("projects").document("owned").set({"title": "Owned", "ownerId": "m1", "status": "active"})
    db.collection("projects").document("joined").set({"title": "Joined", "ownerId": "m2", "status": "completed"})
    db.collection("projects").document("other").set({"title": "Other", "ownerId": "m3", "status": "active"})
    db.collection("projectMembers").add({"projectId": "owned", "userId": "m1", "role": "owner"})
    db.collection("projectMembers").add({"projectId": "joined", "userId": "m1", "role": "member"})
    db.collection("projectMembers").add({"projectId": "deleted", "userId": "m1", "role": "member"})


def test_user_projects_are_deduplicated(db):
    _seed(db)
    assert sorted(p["id"] for p in get_user_projects("m1")) == ["joined", "owned"]


def test_dashboard_stats(db):
    _seed(db)
    for i, day in enumerate(["2025-11-01", "2025-11-11", "2025-11-12", "2025-11-13", "2025-11-14"]):
        db.collection("sessions").document(f"s{i}").set({"title": f"S{i}", "date": day})

    dashboard = get_dashboard("m1", today=date(2025, 11, 10))

    assert dashboard["stats"] == {"activeProjects": 1, "upcomingSessions": 4}
    assert [s["id"] for s in dashboard["upcomingSessions"]] == ["s1", "s2", "s3"]


def test_dashboard_without_user(db):
    assert get_dashboard(None, today=date(2025, 11, 10))["projects"] == []
