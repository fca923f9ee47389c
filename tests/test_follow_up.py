from datetime import timedelta

from tests.conftest import make_member, set_tier
from churchconnect.utils.dates import today


def test_absent_members_are_flagged(client, headers):
    regular = make_member(client, headers, firstName="Regular")
    absent = make_member(client, headers, firstName="Absent")
    lapsed = make_member(client, headers, firstName="Lapsed")
    make_member(client, headers, firstName="Former", isCurrentMember=False)

    client.post("/api/attendance", json={"memberId": regular["id"]}, headers=headers)
    long_ago = today() - timedelta(days=30)
    client.post(
        "/api/attendance",
        json={"memberId": lapsed["id"], "attendanceDate": long_ago.isoformat()},
        headers=headers,
    )

    body = client.post("/api/follow-up/update-absences", headers=headers).get_json()
    assert body == {"success": True, "flagged": 2}

    queue = client.get("/api/follow-up", headers=headers).get_json()
    assert {m["id"] for m in queue} == {absent["id"], lapsed["id"]}
    assert all(m["consecutiveAbsences"] == 3 for m in queue)


def test_recording_contact_clears_flag(client, headers):
    member = make_member(client, headers)
    client.post("/api/follow-up/update-absences", headers=headers)

    response = client.post(
        f"/api/follow-up/{member['id']}", json={"method": "sms"}, headers=headers
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["notificationSent"] is True
    assert body["followUpRecord"]["contactMethod"] == "sms"
    assert body["followUpRecord"]["needsFollowUp"] is False
    assert body["followUpRecord"]["lastContactDate"] is not None

    assert client.get("/api/follow-up", headers=headers).get_json() == []


def test_contact_method_must_be_known(client, headers):
    member = make_member(client, headers)
    response = client.post(
        f"/api/follow-up/{member['id']}", json={"method": "pigeon"}, headers=headers
    )
    assert response.status_code == 400


def test_contact_unknown_member(client, headers):
    response = client.post("/api/follow-up/9999", json={"method": "email"}, headers=headers)
    assert response.status_code == 404


def test_follow_up_needs_growth(app, client, church, headers):
    set_tier(app, church["church"]["id"], "starter")
    response = client.get("/api/follow-up", headers=headers)
    assert response.status_code == 403
    assert response.get_json()["feature"] == "follow_up_queue"
