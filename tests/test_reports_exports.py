import csv
import io

from tests.conftest import make_member, set_tier
from churchconnect.utils.dates import today


def _rows(response):
    return list(csv.reader(io.StringIO(response.get_data(as_text=True))))


def test_weekly_attendance_groups_by_gender(client, headers):
    for first, gender in (("Kwame", "male"), ("Yaw", "male"), ("Efua", "female")):
        member = make_member(client, headers, firstName=first, gender=gender)
        client.post("/api/attendance", json={"memberId": member["id"]}, headers=headers)

    rows = client.get("/api/reports/weekly-attendance", headers=headers).get_json()
    counts = {r["group"]: r["count"] for r in rows}
    assert counts == {"male": 2, "female": 1}
    assert all(r["date"] == today().isoformat() for r in rows)


def test_missed_services_and_new_members(client, headers):
    present = make_member(client, headers, firstName="Present")
    missing = make_member(client, headers, firstName="Missing")
    client.post("/api/attendance", json={"memberId": present["id"]}, headers=headers)

    missed = client.get("/api/reports/missed-services", headers=headers).get_json()
    assert [m["id"] for m in missed] == [missing["id"]]
    assert missed[0]["lastAttendance"] is None

    new = client.get("/api/reports/new-members", headers=headers).get_json()
    assert {m["id"] for m in new} == {present["id"], missing["id"]}


def test_family_check_in_summary(client, headers):
    parent = make_member(client, headers)
    make_member(client, headers, firstName="Kofi", ageGroup="child", phone=None, parentId=parent["id"])
    client.post("/api/attendance/family-checkin", json={"parentId": parent["id"]}, headers=headers)

    rows = client.get("/api/reports/family-checkin-summary", headers=headers).get_json()
    assert [r["childName"] for r in rows] == ["Kofi Mensah"]
    assert rows[0]["parentName"] == "John Mensah"
    assert rows[0]["parentId"] == parent["id"]


def test_reports_need_paid_plan_after_trial(app, client, church, headers):
    set_tier(app, church["church"]["id"], "trial")
    response = client.get("/api/reports/weekly-attendance", headers=headers)
    assert response.status_code == 403


def test_report_configs_and_runs(client, headers):
    created = client.post(
        "/api/admin/report-configs",
        json={"reportType": "weekly-attendance", "title": "Weekly numbers", "frequency": "weekly"},
        headers=headers,
    )
    assert created.status_code == 201
    config = created.get_json()
    assert config["frequency"] == "weekly"

    updated = client.put(
        f"/api/admin/report-configs/{config['id']}", json={"isActive": False}, headers=headers
    ).get_json()
    assert updated["isActive"] is False

    run = client.post(
        "/api/admin/report-runs",
        json={"reportConfigId": config["id"], "parameters": {"weeks": 3}},
        headers=headers,
    )
    assert run.status_code == 201
    assert run.get_json()["parameters"] == {"weeks": 3}

    runs = client.get("/api/admin/report-runs", headers=headers).get_json()
    assert [r["reportTitle"] for r in runs] == ["Weekly numbers"]

    missing = client.post(
        "/api/admin/report-runs", json={"reportConfigId": 999}, headers=headers
    )
    assert missing.status_code == 404

    assert client.delete(
        f"/api/admin/report-configs/{config['id']}", headers=headers
    ).status_code == 200
    assert client.get("/api/admin/report-configs", headers=headers).get_json() == []


def test_members_csv_export(client, headers):
    make_member(client, headers, email="john@example.com")
    response = client.get("/api/export/members", headers=headers)
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert response.headers["Content-Disposition"] == (
        f'attachment; filename="members_export_{today().isoformat()}.csv"'
    )
    header, row = _rows(response)
    assert header[0] == "Member Name"
    assert row[0] == "John Mensah"
    assert row[5] == "john@example.com"
    assert row[10] == "true"


def test_attendance_csv_export(client, headers):
    member = make_member(client, headers)
    client.post(
        "/api/attendance",
        json={"memberId": member["id"], "attendanceDate": "2024-02-04"},
        headers=headers,
    )
    client.post(
        "/api/visitor-checkin",
        json={"name": "Guest", "ageGroup": "adult"},
        headers=headers,
    )

    single = client.get("/api/export/attendance?startDate=2024-02-04", headers=headers)
    assert 'filename="attendance_history_2024-02-04.csv"' in single.headers["Content-Disposition"]
    rows = _rows(single)
    assert len(rows) == 2
    assert rows[1][1] == "John Mensah"
    assert rows[1][2] == "No Event"
    assert rows[1][8] == "Member"

    span = client.get(
        f"/api/export/attendance?startDate=2024-02-01&endDate={today().isoformat()}",
        headers=headers,
    )
    assert f"2024-02-01_to_{today().isoformat()}" in span.headers["Content-Disposition"]
    assert [r[8] for r in _rows(span)[1:]] == ["Visitor", "Member"]


def test_monthly_report_export(client, headers):
    member = make_member(client, headers)
    client.post(
        "/api/attendance",
        json={"memberId": member["id"], "attendanceDate": "2024-02-04"},
        headers=headers,
    )
    response = client.get("/api/export/monthly-report?month=2&year=2024", headers=headers)
    assert 'filename="monthly_report_2024_02.csv"' in response.headers["Content-Disposition"]
    rows = _rows(response)
    assert rows[0] == ["Monthly Report - February 2024"]
    assert ["Total Attendance", "1"] in rows
    assert ["2024-02-04", "male", "adult", "1"] in rows

    bad = client.get("/api/export/monthly-report?month=13&year=2024", headers=headers)
    assert bad.status_code == 400

    for query in ("month=0&year=2024", "month=-1&year=2024", "month=2&year=0"):
        response = client.get(f"/api/export/monthly-report?{query}", headers=headers)
        assert response.status_code == 400, query


def test_report_runs_count_against_monthly_limit(app, client, church, headers):
    config = client.post(
        "/api/admin/report-configs",
        json={"reportType": "new-members", "title": "New members"},
        headers=headers,
    ).get_json()
    set_tier(app, church["church"]["id"], "starter")

    for _ in range(5):
        ok = client.post(
            "/api/admin/report-runs", json={"reportConfigId": config["id"]}, headers=headers
        )
        assert ok.status_code == 201

    blocked = client.post(
        "/api/admin/report-runs", json={"reportConfigId": config["id"]}, headers=headers
    )
    assert blocked.status_code == 403
    body = blocked.get_json()
    assert body["error"] == "Usage limit exceeded"
    assert body["currentUsage"] == 5
    assert body["limit"] == 5
