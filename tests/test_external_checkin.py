import pytest

from tests.conftest import make_event, make_member

BASE = "/api/external-checkin"


@pytest.fixture
def open_event(client, headers):
    event = make_event(client, headers, location="Main Hall")
    response = client.post(
        f"{BASE}/events/{event['id']}/external-checkin/toggle",
        json={"enabled": True},
        headers=headers,
    )
    assert response.status_code == 200
    return response.get_json()


def test_toggle_generates_url_and_pin(open_event):
    event = open_event["event"]
    assert event["externalCheckInEnabled"] is True
    assert len(event["externalCheckInUrl"]) == 16
    assert len(event["externalCheckInPin"]) == 6
    assert event["externalCheckInPin"].isdigit()
    assert open_event["externalUrl"].endswith(f"/external-checkin/{event['externalCheckInUrl']}")


def test_toggle_requires_boolean(client, headers):
    event = make_event(client, headers)
    response = client.post(
        f"{BASE}/events/{event['id']}/external-checkin/toggle",
        json={"enabled": "yes"},
        headers=headers,
    )
    assert response.status_code == 400


def test_details_for_admin(client, headers, open_event):
    event = open_event["event"]
    details = client.get(
        f"{BASE}/events/{event['id']}/external-checkin", headers=headers
    ).get_json()
    assert details["enabled"] is True
    assert details["pin"] == event["externalCheckInPin"]
    assert details["fullUrl"].startswith("http://localhost")


def test_public_page_hides_pin(client, church, open_event):
    token = open_event["event"]["externalCheckInUrl"]
    page = client.get(f"{BASE}/{token}").get_json()
    assert page["eventName"] == "Sunday Service"
    assert page["churchName"] == church["church"]["name"]
    assert page["requiresPin"] is True
    assert "pin" not in {k.lower() for k in page}


def test_member_list_requires_correct_pin(client, headers, open_event):
    make_member(client, headers)
    make_member(client, headers, firstName="Former", isCurrentMember=False)
    event = open_event["event"]
    token = event["externalCheckInUrl"]

    assert client.get(f"{BASE}/{token}/members").status_code == 400
    assert client.get(f"{BASE}/{token}/members?pin=12ab").status_code == 400

    wrong = "000000" if event["externalCheckInPin"] != "000000" else "111111"
    assert client.get(f"{BASE}/{token}/members?pin={wrong}").status_code == 401

    members = client.get(f"{BASE}/{token}/members?pin={event['externalCheckInPin']}").get_json()
    assert [m["name"] for m in members] == ["John Mensah"]


def test_check_in_and_duplicate(client, headers, open_event):
    member = make_member(client, headers)
    event = open_event["event"]
    url = f"{BASE}/{event['externalCheckInUrl']}/checkin"
    payload = {"pin": event["externalCheckInPin"], "memberId": member["id"]}

    first = client.post(url, json=payload)
    assert first.status_code == 201
    assert first.get_json()["message"] == "Check-in successful for John Mensah"

    again = client.post(url, json=payload)
    assert again.status_code == 409
    assert again.get_json()["isDuplicate"] is True

    history = client.get(f"/api/members/{member['id']}/attendance", headers=headers).get_json()
    assert history[0]["checkInMethod"] == "external"
    assert history[0]["eventId"] == event["id"]


def test_check_in_missing_fields(client, open_event):
    url = f"{BASE}/{open_event['event']['externalCheckInUrl']}/checkin"
    response = client.post(url, json={})
    assert response.status_code == 400
    assert set(response.get_json()["missing_fields"]) == {"pin", "memberId"}


def test_disabled_link_is_not_found(client, headers, open_event):
    event = open_event["event"]
    token = event["externalCheckInUrl"]
    client.post(
        f"{BASE}/events/{event['id']}/external-checkin/toggle",
        json={"enabled": False},
        headers=headers,
    )
    assert client.get(f"{BASE}/{token}").status_code == 404
    assert client.get(f"{BASE}/does-not-exist").status_code == 404


@pytest.mark.parametrize(
    "body",
    [
        {"memberId": [1]},
        {"memberId": "abc"},
        {"memberId": {"id": 1}},
        {"pin": "12ab"},
        {"pin": 123456},
    ],
)
def test_check_in_rejects_malformed_payload(client, headers, open_event, body):
    member = make_member(client, headers)
    payload = {"pin": open_event["event"]["externalCheckInPin"], "memberId": member["id"]}
    payload.update(body)

    response = client.post(f"{BASE}/{open_event['event']['externalCheckInUrl']}/checkin", json=payload)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Validation error"

    history = client.get(f"/api/members/{member['id']}/attendance", headers=headers).get_json()
    assert history == []


def test_toggle_requires_a_body(client, headers):
    event = make_event(client, headers)
    response = client.post(
        f"{BASE}/events/{event['id']}/external-checkin/toggle", json={}, headers=headers
    )
    assert response.status_code == 400
    assert response.get_json()["details"][0]["field"] == "enabled"
