from datetime import timedelta

import pytest
from werkzeug.security import generate_password_hash

from churchconnect import create_app
from churchconnect.extensions import db
from churchconnect.models import Church, SuperAdmin
from churchconnect.utils.dates import utcnow

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
    "RATELIMIT_ENABLED": False,
    "STRIPE_SECRET_KEY": "sk_test_123",
    "STRIPE_PUBLISHABLE_KEY": "pk_test_123",
    "STRIPE_WEBHOOK_SECRET": "whsec_test",
    "STRIPE_STARTER_PRICE_ID": "price_starter",
    "STRIPE_GROWTH_PRICE_ID": "price_growth",
    "STRIPE_ENTERPRISE_PRICE_ID": "price_enterprise",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register_church(client, name="Grace Chapel", email="pastor@grace.org", **extra):
    payload = {
        "churchName": name,
        "adminFirstName": "Ada",
        "adminLastName": "Okafor",
        "adminEmail": email,
        "password": "supersecret",
    }
    payload.update(extra)
    response = client.post("/api/churches/register", json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def church(client):
    return register_church(client)


@pytest.fixture
def headers(church):
    return auth_headers(church["token"])


@pytest.fixture
def other_church(client):
    return register_church(client, name="Hope Assembly", email="admin@hope.org")


def set_tier(app, church_id, tier, trial_expired=True, **fields):
    """Move a church off its trial so the feature matrix applies."""
    with app.app_context():
        church = db.session.get(Church, church_id)
        church.subscription_tier = tier
        if trial_expired:
            church.trial_end_date = utcnow() - timedelta(days=1)
        for name, value in fields.items():
            setattr(church, name, value)
        db.session.commit()


@pytest.fixture
def super_admin(app):
    with app.app_context():
        admin = SuperAdmin(
            email="root@churchconnect.io",
            password=generate_password_hash("rootpassword"),
            first_name="Platform",
            last_name="Owner",
            role="super_admin",
            is_active=True,
        )
        db.session.add(admin)
        db.session.commit()
        return {"id": admin.id, "email": admin.email, "password": "rootpassword"}


@pytest.fixture
def super_headers(client, super_admin):
    response = client.post(
        "/api/super-admin/login",
        json={"email": super_admin["email"], "password": super_admin["password"]},
    )
    assert response.status_code == 200
    return auth_headers(response.get_json()["token"])


def make_member(client, headers, **fields):
    payload = {
        "firstName": "John",
        "surname": "Mensah",
        "gender": "male",
        "ageGroup": "adult",
        "phone": "+233 20 555 0101",
    }
    payload.update(fields)
    response = client.post("/api/members", json=payload, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def make_event(client, headers, **fields):
    payload = {"name": "Sunday Service", "eventType": "sunday_service"}
    payload.update(fields)
    response = client.post("/api/events", json=payload, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()
