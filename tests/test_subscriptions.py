import json
import time
from types import SimpleNamespace
from unittest.mock import patch

import stripe

from tests.conftest import make_member, set_tier


def _stripe_subscription(church_id, plan_id="growth", sub_id="sub_123", **extra):
    now = int(time.time())
    data = {
        "id": sub_id,
        "object": "subscription",
        "customer": "cus_123",
        "status": "active",
        "cancel_at_period_end": False,
        "metadata": {"churchId": str(church_id), "planId": plan_id},
        "items": {
            "data": [
                {
                    "id": "si_1",
                    "current_period_start": now,
                    "current_period_end": now + 30 * 86400,
                }
            ]
        },
    }
    data.update(extra)
    return data


def _post_webhook(client, event_type, obj):
    payload = json.dumps({"type": event_type, "data": {"object": obj}})
    with patch("stripe.Webhook.construct_event") as construct:
        response = client.post(
            "/api/subscriptions/webhook",
            data=payload,
            headers={"Stripe-Signature": "t=1,v1=abc", "Content-Type": "application/json"},
        )
    construct.assert_called_once_with(payload, "t=1,v1=abc", "whsec_test")
    return response


def _subscribe(client, church_id, plan_id="growth"):
    response = _post_webhook(
        client, "customer.subscription.created", _stripe_subscription(church_id, plan_id)
    )
    assert response.status_code == 200
    return response


def test_public_config(client):
    assert client.get("/api/subscriptions/config").get_json() == {"publishableKey": "pk_test_123"}


def test_status_during_trial(app, client, church, headers):
    make_member(client, headers)
    body = client.get("/api/subscriptions/status", headers=headers).get_json()
    assert body["church"]["subscriptionTier"] == "trial"
    assert body["church"]["isTrialActive"] is True
    assert body["church"]["memberCount"] == 1
    assert body["church"]["memberUsagePercent"] == 0
    assert body["subscription"] is None
    assert [p["monthlyPrice"] for p in body["availablePlans"]] == [19, 49, 99]

    set_tier(app, church["church"]["id"], "starter", max_members=4)
    capped = client.get("/api/subscriptions/status", headers=headers).get_json()
    assert capped["church"]["memberUsagePercent"] == 25


def test_checkout_session(client, church, headers):
    session = SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/cs_test_1")
    with patch("stripe.checkout.Session.create", return_value=session) as create:
        response = client.post(
            "/api/subscriptions/checkout",
            json={
                "planId": "growth",
                "successUrl": "https://app.example.com/ok",
                "cancelUrl": "https://app.example.com/cancel",
            },
            headers=headers,
        )
    assert response.status_code == 200
    assert response.get_json() == {"sessionId": "cs_test_1", "url": session.url}

    kwargs = create.call_args.kwargs
    assert kwargs["line_items"] == [{"price": "price_growth", "quantity": 1}]
    assert kwargs["metadata"] == {"churchId": str(church["church"]["id"]), "planId": "growth"}
    assert kwargs["customer_email"] == "pastor@grace.org"


def test_checkout_rejects_unknown_plan(client, headers):
    response = client.post(
        "/api/subscriptions/checkout",
        json={"planId": "platinum", "successUrl": "https://a.b/c", "cancelUrl": "https://a.b/d"},
        headers=headers,
    )
    assert response.status_code == 400


def test_checkout_stripe_failure(client, headers):
    with patch("stripe.checkout.Session.create", side_effect=stripe.StripeError("boom")):
        response = client.post(
            "/api/subscriptions/checkout",
            json={"planId": "starter", "successUrl": "https://a.b/c", "cancelUrl": "https://a.b/d"},
            headers=headers,
        )
    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to create checkout session"


def test_webhook_created_upgrades_church(client, church, headers):
    _subscribe(client, church["church"]["id"], "enterprise")

    body = client.get("/api/subscriptions/status", headers=headers).get_json()
    assert body["church"]["subscriptionTier"] == "enterprise"
    assert body["subscription"]["status"] == "active"
    assert body["subscription"]["stripeSubscriptionId"] == "sub_123"
    assert body["subscription"]["currentPeriodEnd"] is not None
    assert body["planDetails"]["id"] == "enterprise"

    again = client.post(
        "/api/subscriptions/checkout",
        json={"planId": "growth", "successUrl": "https://a.b/c", "cancelUrl": "https://a.b/d"},
        headers=headers,
    )
    assert again.status_code == 400


def test_webhook_deleted_returns_to_trial(client, church, headers):
    church_id = church["church"]["id"]
    _subscribe(client, church_id)
    _post_webhook(
        client,
        "customer.subscription.deleted",
        _stripe_subscription(church_id, status="canceled"),
    )
    body = client.get("/api/subscriptions/status", headers=headers).get_json()
    assert body["church"]["subscriptionTier"] == "trial"
    assert body["church"]["maxMembers"] == 100
    assert body["subscription"]["status"] == "canceled"


def test_webhook_signature_checks(client):
    missing = client.post("/api/subscriptions/webhook", data="{}")
    assert missing.status_code == 400
    assert missing.get_json()["error"] == "Missing stripe-signature header"

    error = stripe.SignatureVerificationError("bad signature", "t=1,v1=bad")
    with patch("stripe.Webhook.construct_event", side_effect=error):
        response = client.post(
            "/api/subscriptions/webhook", data="{}", headers={"Stripe-Signature": "t=1,v1=bad"}
        )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid signature"


def test_webhook_created_without_church_metadata(client):
    obj = _stripe_subscription(1, metadata={})
    response = _post_webhook(client, "customer.subscription.created", obj)
    assert response.status_code == 400


def test_change_plan(client, church, headers):
    church_id = church["church"]["id"]
    _subscribe(client, church_id, "starter")
    remote = _stripe_subscription(church_id, "starter")
    updated = _stripe_subscription(church_id, "enterprise")

    with patch("stripe.Subscription.retrieve", return_value=remote), \
            patch("stripe.Subscription.modify", return_value=updated) as modify:
        response = client.post(
            "/api/subscriptions/change-plan", json={"newPlanId": "enterprise"}, headers=headers
        )
    assert response.status_code == 200
    assert response.get_json()["subscription"]["planId"] == "enterprise"
    args, kwargs = modify.call_args
    assert args == ("sub_123",)
    assert kwargs["items"] == [{"id": "si_1", "price": "price_enterprise"}]

    features = client.get("/api/churches/features", headers=headers).get_json()
    assert features["subscriptionTier"] == "enterprise"


def test_cancel_and_reactivate(client, church, headers):
    assert client.post("/api/subscriptions/cancel", headers=headers).status_code == 400

    _subscribe(client, church["church"]["id"])
    with patch("stripe.Subscription.modify") as modify:
        cancelled = client.post("/api/subscriptions/cancel", headers=headers).get_json()
        assert cancelled["subscription"]["cancelAtPeriodEnd"] is True
        modify.assert_called_with("sub_123", cancel_at_period_end=True)

        restored = client.post("/api/subscriptions/reactivate", headers=headers).get_json()
        assert restored["subscription"]["cancelAtPeriodEnd"] is False


def test_portal_session(client, church, headers):
    _subscribe(client, church["church"]["id"])
    portal = SimpleNamespace(url="https://billing.stripe.com/p/session")
    with patch("stripe.billing_portal.Session.create", return_value=portal) as create:
        response = client.post(
            "/api/subscriptions/portal",
            json={"returnUrl": "https://app.example.com/billing"},
            headers=headers,
        )
    assert response.get_json() == {"url": portal.url}
    create.assert_called_once_with(customer="cus_123", return_url="https://app.example.com/billing")


def test_billing_routes_are_admin_only(client, headers):
    client.post(
        "/api/admin/users",
        json={
            "username": "viewer",
            "fullName": "Data Viewer",
            "email": "viewer@grace.org",
            "password": "secret1",
            "role": "data_viewer",
        },
        headers=headers,
    )
    token = client.post(
        "/api/churches/login", json={"email": "viewer@grace.org", "password": "secret1"}
    ).get_json()["token"]
    response = client.post(
        "/api/subscriptions/cancel", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 403
