from tests.conftest import make_event, make_member


def test_create_event_blank_dates_become_null(client, headers):
    event = make_event(client, headers, startDate="", endDate="", startTime="09:00", endTime="")
    assert event["startDate"] is None
    assert event["startTime"] == "09:00"
    assert event["endTime"] is None
    assert event["isActive"] is True


def test_event_validation(client, headers):
    bad_time = client.post(
        "/api/events", json={"name": "Late", "startTime": "25:00"}, headers=headers
    )
    assert bad_time.status_code == 400

    backwards = client.post(
        "/api/events",
        json={"name": "Camp", "startDate": "2024-08-10", "endDate": "2024-08-01"},
        headers=headers,
    )
    assert backwards.status_code == 400


def test_update_cannot_reverse_dates(client, headers):
    event = make_event(client, headers, startDate="2024-08-10")
    response = client.put(
        f"/api/events/{event['id']}", json={"endDate": "2024-08-01"}, headers=headers
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "End date cannot be before start date"


def test_active_events_and_delete(client, headers):
    make_event(client, headers, name="Bible Study", eventType="bible_study")
    retired = make_event(client, headers, name="Old Program", isActive=False)

    names = [e["name"] for e in client.get("/api/events/active", headers=headers).get_json()]
    assert names == ["Bible Study"]
    assert len(client.get("/api/events", headers=headers).get_json()) == 2

    assert client.delete(f"/api/events/{retired['id']}", headers=headers).status_code == 200
    assert len(client.get("/api/events", headers=headers).get_json()) == 1


def test_attendance_counts_and_stats(client, headers):
    event = make_event(client, headers)
    quiet = make_event(client, headers, name="Midweek")
    member = make_member(client, headers)
    client.post("/api/attendance", json={"memberId": member["id"], "eventId": event["id"]}, headers=headers)
    client.post(
        "/api/visitor-checkin",
        json={"name": "Guest One", "gender": "female", "ageGroup": "child", "eventId": event["id"]},
        headers=headers,
    )

    counts = {
        c["eventId"]: c["totalAttendance"]
        for c in client.get("/api/events/attendance-counts", headers=headers).get_json()
    }
    assert counts == {event["id"]: 2, quiet["id"]: 0}

    stats = client.get(f"/api/events/{event['id']}/attendance-stats", headers=headers).get_json()
    assert stats["totalAttendance"] == 2
    assert stats["memberAttendance"] == 1
    assert stats["visitorAttendance"] == 1
    assert stats["genderBreakdown"] == {"male": 1, "female": 1}
    assert len(stats["uniqueDates"]) == 1


def test_events_are_church_scoped(client, headers, other_church):
    event = make_event(client, headers)
    other = {"Authorization": f"Bearer {other_church['token']}"}
    assert client.get(f"/api/events/{event['id']}", headers=other).status_code == 404
    assert client.delete(f"/api/events/{event['id']}", headers=other).status_code == 404
