from tests.conftest import make_member, set_tier


def test_adult_requires_phone(client, headers):
    response = client.post(
        "/api/members",
        json={"firstName": "Ama", "surname": "Owusu", "gender": "female", "ageGroup": "adult"},
        headers=headers,
    )
    assert response.status_code == 400
    messages = " ".join(d["message"] for d in response.get_json()["details"])
    assert "Phone number is required for adults" in messages


def test_child_without_phone_and_blank_strings(client, headers):
    member = make_member(
        client,
        headers,
        firstName="Kwame",
        ageGroup="child",
        phone="",
        email="",
        dateOfBirth="2015-04-01",
    )
    assert member["phone"] is None
    assert member["email"] is None
    assert member["dateOfBirth"] == "2015-04-01"


def test_rejects_bad_phone_and_future_birthdate(client, headers):
    response = client.post(
        "/api/members",
        json={
            "firstName": "Ama",
            "surname": "Owusu",
            "gender": "female",
            "ageGroup": "adult",
            "phone": "call me",
            "dateOfBirth": "2999-01-01",
        },
        headers=headers,
    )
    assert response.status_code == 400
    fields = {d["field"] for d in response.get_json()["details"]}
    assert {"phone", "dateOfBirth"} <= fields


def test_parent_must_belong_to_church(client, headers, other_church):
    foreign = make_member(
        client, {"Authorization": f"Bearer {other_church['token']}"}, firstName="Other"
    )
    response = client.post(
        "/api/members",
        json={
            "firstName": "Kid",
            "surname": "Mensah",
            "gender": "male",
            "ageGroup": "child",
            "parentId": foreign["id"],
        },
        headers=headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Parent member not found"


def test_list_search_and_group_filter(client, headers):
    make_member(client, headers, firstName="Abena", surname="Asante", gender="female")
    make_member(client, headers, firstName="Yaw", surname="Asante")
    make_member(client, headers, firstName="Zed", surname="Brown")

    everyone = client.get("/api/members?group=all", headers=headers).get_json()
    assert [m["firstName"] for m in everyone] == ["Abena", "Yaw", "Zed"]

    asantes = client.get("/api/members?search=asan", headers=headers).get_json()
    assert {m["firstName"] for m in asantes} == {"Abena", "Yaw"}

    women = client.get("/api/members?group=female", headers=headers).get_json()
    assert [m["firstName"] for m in women] == ["Abena"]


def test_members_are_isolated_between_churches(client, headers, other_church):
    member = make_member(client, headers)
    other_headers = {"Authorization": f"Bearer {other_church['token']}"}
    assert client.get(f"/api/members/{member['id']}", headers=other_headers).status_code == 404
    assert client.get("/api/members", headers=other_headers).get_json() == []


def test_update_member_keeps_adult_phone_rule(client, headers):
    member = make_member(client, headers, ageGroup="child", phone=None)
    response = client.put(
        f"/api/members/{member['id']}", json={"ageGroup": "adult"}, headers=headers
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Phone number is required for adults"

    response = client.put(
        f"/api/members/{member['id']}",
        json={"ageGroup": "adult", "phone": "0244000000"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.get_json()["ageGroup"] == "adult"


def test_children_routes(client, headers):
    parent = make_member(client, headers)
    child = make_member(
        client, headers, firstName="Esi", ageGroup="child", phone=None, parentId=parent["id"]
    )
    for url in (f"/api/members/{parent['id']}/children", f"/api/members/children/{parent['id']}"):
        children = client.get(url, headers=headers).get_json()
        assert [c["id"] for c in children] == [child["id"]]


def test_delete_member(client, headers):
    member = make_member(client, headers)
    assert client.delete(f"/api/members/{member['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/members/{member['id']}", headers=headers).status_code == 404


def test_member_limit_enforced(app, client, church, headers):
    make_member(client, headers)
    set_tier(app, church["church"]["id"], "starter", max_members=1)
    response = client.post(
        "/api/members",
        json={"firstName": "Two", "surname": "X", "gender": "male", "ageGroup": "child"},
        headers=headers,
    )
    assert response.status_code == 403
    body = response.get_json()
    assert body["error"] == "Member limit reached"
    assert body["currentCount"] == 1
    assert body["limit"] == 1
    assert body["upgradeRequired"] is True
    assert "allows up to 1 members" in body["message"]


def test_bulk_upload_reports_row_errors(client, headers):
    response = client.post(
        "/api/members/bulk-upload",
        json={
            "members": [
                {"firstName": "Ok", "surname": "One", "gender": "male", "ageGroup": "child"},
                {"firstName": "No", "surname": "Phone", "gender": "female", "ageGroup": "adult"},
                {"firstName": "Ok", "surname": "Two", "gender": "female", "ageGroup": "adult",
                 "phone": "0244111222"},
            ]
        },
        headers=headers,
    )
    assert response.status_code == 201
    body = response.get_json()
    assert body["created"] == 2
    assert body["total"] == 3
    assert len(body["errors"]) == 1
    assert body["errors"][0].startswith("Member No Phone:")


def test_bulk_upload_stops_at_member_limit(app, client, church, headers):
    set_tier(app, church["church"]["id"], "enterprise", max_members=2)
    make_member(client, headers)
    rows = [
        {"firstName": f"Kid{i}", "surname": "Row", "gender": "male", "ageGroup": "child"}
        for i in range(3)
    ]
    body = client.post(
        "/api/members/bulk-upload", json={"members": rows}, headers=headers
    ).get_json()
    assert body["created"] == 1
    assert len(body["errors"]) == 2
    assert all("Member limit reached" in e for e in body["errors"])


def test_bulk_upload_needs_enterprise(app, client, church, headers):
    set_tier(app, church["church"]["id"], "growth")
    response = client.post(
        "/api/members/bulk-upload",
        json={"members": [{"firstName": "A", "surname": "B", "gender": "male", "ageGroup": "child"}]},
        headers=headers,
    )
    assert response.status_code == 403
    assert response.get_json()["upgradeRequired"] is True


def test_fingerprint_enroll_and_scan(client, headers):
    member = make_member(client, headers)
    enrolled = client.post(
        "/api/fingerprint/enroll", json={"memberId": member["id"]}, headers=headers
    ).get_json()
    fingerprint_id = enrolled["fingerprintId"]
    assert fingerprint_id.startswith(f"fp_{member['id']}_")

    first = client.post(
        "/api/fingerprint/scan", json={"fingerprintId": fingerprint_id}, headers=headers
    ).get_json()
    assert first["checkInSuccess"] is True
    assert first["member"]["id"] == member["id"]

    second = client.post(
        "/api/fingerprint/scan", json={"fingerprintId": fingerprint_id}, headers=headers
    ).get_json()
    assert second["checkInSuccess"] is False
    assert second["isDuplicate"] is True


def test_unknown_fingerprint_returns_scanned_id(client, headers):
    body = client.post(
        "/api/fingerprint/scan", json={"deviceId": "dev42"}, headers=headers
    ).get_json()
    assert body["member"] is None
    assert body["scannedFingerprintId"] == "fp_mock_dev42"
