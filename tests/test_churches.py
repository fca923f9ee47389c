import logging
from datetime import timedelta
from unittest.mock import patch

import pytest

from churchconnect import create_app
from churchconnect.auth import generate_subdomain
from churchconnect.extensions import db
from churchconnect.models import Church
from churchconnect.utils.dates import utcnow
from tests.conftest import TEST_CONFIG, auth_headers, register_church, set_tier


def test_register_creates_trial_church(church):
    assert church["church"]["subdomain"] == "grace-chapel"
    assert church["church"]["subscriptionTier"] == "trial"
    assert church["church"]["isTrialActive"] is True
    assert church["church"]["trialDaysRemaining"] == 30
    assert church["church"]["maxMembers"] == 999999
    assert church["user"]["role"] == "admin"
    assert church["token"]


def test_register_rejects_duplicate_email(client, church):
    response = client.post(
        "/api/churches/register",
        json={
            "churchName": "Another Church",
            "adminFirstName": "A",
            "adminLastName": "B",
            "adminEmail": "PASTOR@grace.org",
            "password": "supersecret",
        },
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Email already registered"


def test_register_deduplicates_subdomain(client, church):
    second = register_church(client, name="Grace Chapel!", email="second@grace.org")
    assert second["church"]["subdomain"] == "grace-chapel-1"


def test_register_validates_payload(client):
    response = client.post(
        "/api/churches/register",
        json={"churchName": "X", "adminEmail": "not-an-email", "password": "short"},
    )
    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "Validation error"
    fields = {d["field"] for d in body["details"]}
    assert {"adminFirstName", "adminEmail", "password"} <= fields


def test_login_and_bad_password(client, church):
    ok = client.post(
        "/api/churches/login", json={"email": "pastor@grace.org", "password": "supersecret"}
    )
    assert ok.status_code == 200
    assert ok.get_json()["church"]["id"] == church["church"]["id"]

    bad = client.post(
        "/api/churches/login", json={"email": "pastor@grace.org", "password": "wrong-one"}
    )
    assert bad.status_code == 401
    assert bad.get_json()["error"] == "Invalid email or password"


def test_suspended_church_is_locked_out(app, client, church, headers):
    set_tier(app, church["church"]["id"], "suspended")

    login = client.post(
        "/api/churches/login", json={"email": "pastor@grace.org", "password": "supersecret"}
    )
    assert login.status_code == 403
    assert login.get_json()["suspended"] is True

    me = client.get("/api/churches/me", headers=headers)
    assert me.status_code == 403
    assert me.get_json()["suspended"] is True


def test_me_requires_token(client):
    response = client.get("/api/churches/me")
    assert response.status_code == 401
    assert response.get_json()["error"] == "Access token required"


def test_me_returns_church_and_trial_headers(client, headers):
    response = client.get("/api/churches/me", headers=headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body["church"]["memberCount"] == 0
    assert body["user"]["email"] == "pastor@grace.org"
    assert response.headers["X-Trial-Status"] == "active"
    assert response.headers["X-Trial-Days-Remaining"] == "30"
    assert "X-Trial-Warning" not in response.headers


def test_trial_warning_header_in_last_week(app, client, church, headers):
    set_tier(
        app,
        church["church"]["id"],
        "trial",
        trial_expired=False,
        trial_end_date=utcnow() + timedelta(days=5),
    )
    response = client.get("/api/churches/me", headers=headers)
    assert response.headers["X-Trial-Status"] == "active"
    assert response.headers["X-Trial-Days-Remaining"] == "5"
    assert response.headers["X-Trial-Warning"] == "Your trial expires in 5 days"

    set_tier(app, church["church"]["id"], "trial")
    expired = client.get("/api/churches/me", headers=headers)
    assert expired.headers["X-Trial-Status"] == "expired"
    assert expired.headers["X-Trial-Days-Remaining"] == "0"
    assert expired.headers["X-Trial-Warning"].startswith("Your trial has expired")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Grace Chapel", "grace-chapel"),
        ("  St. Mary's -- Parish  ", "st-marys-parish"),
        ("Hope!!!   Assembly", "hope-assembly"),
        ("a" * 60, "a" * 50),
        ("b" * 49 + " church", "b" * 49),
    ],
)
def test_generate_subdomain(name, expected):
    assert generate_subdomain(name) == expected


def test_update_settings_validates_color(client, headers):
    response = client.put(
        "/api/churches/settings", json={"brandColor": "blue"}, headers=headers
    )
    assert response.status_code == 400

    response = client.put(
        "/api/churches/settings",
        json={"name": "Grace Chapel Downtown", "brandColor": "#112233"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.get_json()["church"]["brandColor"] == "#112233"
    assert response.get_json()["church"]["name"] == "Grace Chapel Downtown"


def test_volunteer_cannot_change_settings(client, headers):
    created = client.post(
        "/api/admin/users",
        json={
            "fullName": "Val Unteer",
            "email": "val@grace.org",
            "password": "volpass",
            "role": "volunteer",
        },
        headers=headers,
    )
    assert created.status_code == 201

    login = client.post("/api/churches/login", json={"email": "val@grace.org", "password": "volpass"})
    volunteer = auth_headers(login.get_json()["token"])

    response = client.put("/api/churches/settings", json={"name": "Mine"}, headers=volunteer)
    assert response.status_code == 403
    assert response.get_json()["error"] == "Insufficient permissions"


def test_kiosk_session_lifecycle(client, headers):
    start = client.post("/api/churches/kiosk/start", headers=headers)
    assert start.status_code == 400

    settings = client.patch(
        "/api/churches/kiosk-settings",
        json={"kioskModeEnabled": True, "kioskSessionTimeout": 30},
        headers=headers,
    )
    assert settings.status_code == 200
    assert settings.get_json()["kioskSessionTimeout"] == 30

    start = client.post("/api/churches/kiosk/start", headers=headers)
    assert start.status_code == 200
    assert start.get_json()["sessionActive"] is True
    assert 0 < start.get_json()["secondsRemaining"] <= 1800

    end = client.post("/api/churches/kiosk/end", headers=headers)
    assert end.get_json()["sessionActive"] is False


def test_kiosk_timeout_bounds(client, headers):
    response = client.patch(
        "/api/churches/kiosk-settings", json={"kioskSessionTimeout": 2}, headers=headers
    )
    assert response.status_code == 400


def test_check_subdomain(client, church):
    taken = client.post("/api/churches/check-subdomain", json={"subdomain": "grace-chapel"})
    assert taken.get_json() == {"subdomain": "grace-chapel", "available": False}

    free = client.post("/api/churches/check-subdomain", json={"subdomain": "new-church"})
    assert free.get_json()["available"] is True


def test_usage_reports_member_limit(app, client, church, headers):
    set_tier(app, church["church"]["id"], "starter", max_members=100)
    response = client.get("/api/churches/usage", headers=headers)
    body = response.get_json()
    assert body["members"] == {"current": 0, "limit": 100, "percentage": 0}
    assert body["limits"]["monthly_reports"] == 5


def test_branding_requires_enterprise(app, client, church, headers):
    set_tier(app, church["church"]["id"], "growth")
    response = client.put(
        "/api/churches/branding", json={"brandColor": "#000000"}, headers=headers
    )
    assert response.status_code == 403
    assert response.get_json()["feature"] == "custom_branding"

    set_tier(app, church["church"]["id"], "enterprise")
    response = client.put(
        "/api/churches/branding",
        json={"brandColor": "#000000", "bannerUrl": "https://cdn.example.com/b.png"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.get_json()["bannerUrl"] == "https://cdn.example.com/b.png"


def test_stray_value_error_is_a_generic_500():
    app = create_app(TEST_CONFIG)

    @app.route("/boom")
    def boom():
        raise ValueError("internal detail that must not leak")

    response = app.test_client().get("/boom")
    assert response.status_code == 500
    assert response.get_json() == {"error": "An unexpected error occurred"}


def test_welcome_email_uses_configured_trial_length(caplog):
    app = create_app(dict(TEST_CONFIG, TRIAL_LENGTH_DAYS=14))
    with app.app_context():
        db.create_all()

    with caplog.at_level(logging.INFO):
        body = register_church(app.test_client())

    assert body["church"]["trialDaysRemaining"] == 14
    assert "your 14 day free trial has started" in caplog.text
    assert "30 day" not in caplog.text

    with app.app_context():
        db.drop_all()


def test_failed_admin_insert_leaves_no_church(app, client):
    with patch(
        "churchconnect.services.church_service.ChurchUserRepository.create",
        side_effect=RuntimeError("insert failed"),
    ):
        response = client.post(
            "/api/churches/register",
            json={
                "churchName": "Grace Chapel",
                "adminFirstName": "Ada",
                "adminLastName": "Okafor",
                "adminEmail": "pastor@grace.org",
                "password": "supersecret",
            },
        )
    assert response.status_code == 500

    with app.app_context():
        assert Church.query.count() == 0

    retry = register_church(client)
    assert retry["church"]["subdomain"] == "grace-chapel"
