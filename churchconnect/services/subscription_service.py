import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

import stripe
from flask import current_app

from churchconnect.exceptions import NotFoundError, PaymentError, ValidationError
from churchconnect.extensions import db
from churchconnect.features import (
    SUBSCRIPTION_PLANS,
    get_plan,
    is_trial_active,
    trial_days_remaining,
)
from churchconnect.models import Subscription, SubscriptionTier
from churchconnect.repositories import (
    ChurchRepository,
    ChurchUserRepository,
    MemberRepository,
    SubscriptionRepository,
)
from churchconnect.utils.dates import isoformat

logger = logging.getLogger(__name__)

DEFAULT_MAX_MEMBERS = 100


def _get(obj, key, default=None):
    # Works for plain dicts and Stripe API objects alike
    try:
        value = obj[key]
    except (KeyError, TypeError, IndexError):
        return default
    return default if value is None else value


def _timestamp(value):
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _period(subscription, key):
    value = _get(subscription, key)
    if value is None:
        # Newer API versions report billing periods per subscription item
        items = _get(_get(subscription, "items", {}), "data", [])
        if items:
            value = _get(items[0], key)
    return _timestamp(value)


class SubscriptionService:
    @staticmethod
    def _ensure_stripe_key():
        """Ensure Stripe API key is set"""
        if not stripe.api_key:
            stripe.api_key = current_app.config.get("STRIPE_SECRET_KEY")
            if not stripe.api_key:
                raise PaymentError("Stripe API key not configured")

    @staticmethod
    def price_id_for(plan_id):
        plan = get_plan(plan_id)
        price_id = current_app.config.get(f"STRIPE_{plan_id.upper()}_PRICE_ID") or plan.stripe_price_id
        if not price_id:
            raise PaymentError(f"Stripe price not configured for plan {plan_id}")
        return price_id

    @staticmethod
    def get_stripe_config() -> Dict[str, str]:
        """Get Stripe publishable key for frontend"""
        return {"publishableKey": current_app.config.get("STRIPE_PUBLISHABLE_KEY", "")}

    @staticmethod
    def create_checkout_session(church, user_id, plan_id, success_url, cancel_url):
        existing = SubscriptionRepository.find_current_for_church(church.id)
        if existing and existing.status == "active":
            raise ValidationError(
                "Church already has an active subscription. Use billing portal to make changes."
            )

        SubscriptionService._ensure_stripe_key()
        user = ChurchUserRepository.find_in_church(user_id, church.id)
        metadata = {"churchId": str(church.id), "planId": plan_id}
        params: Dict[str, Any] = {
            "mode": "subscription",
            "payment_method_types": ["card"],
            "line_items": [{"price": SubscriptionService.price_id_for(plan_id), "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
            "client_reference_id": str(church.id),
            "subscription_data": {"metadata": metadata},
        }
        if church.stripe_customer_id:
            params["customer"] = church.stripe_customer_id
        elif user:
            params["customer_email"] = user.email

        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            current_app.logger.error(f"Stripe error creating checkout session: {str(e)}")
            raise PaymentError("Failed to create checkout session")

        logger.info(f"Checkout session created for church {church.id}, plan {plan_id}")
        return {"sessionId": session.id, "url": session.url}

    @staticmethod
    def _require_stripe_subscription(church_id, message="No active subscription found"):
        subscription = SubscriptionRepository.find_current_for_church(church_id)
        if not subscription or not subscription.stripe_subscription_id:
            raise ValidationError(message)
        return subscription

    @staticmethod
    def create_portal_session(church, return_url):
        subscription = SubscriptionService._require_stripe_subscription(church.id)
        SubscriptionService._ensure_stripe_key()
        try:
            customer_id = church.stripe_customer_id
            if not customer_id:
                remote = stripe.Subscription.retrieve(subscription.stripe_subscription_id)
                customer = _get(remote, "customer")
                customer_id = customer if isinstance(customer, str) else _get(customer, "id")
            if not customer_id:
                raise ValidationError("No customer associated with subscription")
            session = stripe.billing_portal.Session.create(
                customer=customer_id, return_url=return_url
            )
        except stripe.StripeError as e:
            current_app.logger.error(f"Stripe error creating portal session: {str(e)}")
            raise PaymentError("Failed to create billing portal session")
        return {"url": session.url}

    @staticmethod
    def get_status(church):
        member_count = MemberRepository.count_for_church(church.id)
        max_members = church.max_members or DEFAULT_MAX_MEMBERS
        subscription = SubscriptionRepository.find_current_for_church(church.id)
        plan = get_plan(church.subscription_tier)
        return {
            "church": {
                "id": church.id,
                "name": church.name,
                "subscriptionTier": church.subscription_tier,
                "maxMembers": max_members,
                "memberCount": member_count,
                "memberUsagePercent": round(member_count / max_members * 100),
                "isTrialActive": is_trial_active(church),
                "trialDaysRemaining": trial_days_remaining(church),
                "trialEndDate": isoformat(church.trial_end_date),
            },
            "subscription": subscription.to_dict() if subscription else None,
            "planDetails": plan.to_dict() if plan else None,
            "availablePlans": [
                {
                    "id": p.id,
                    "name": p.name,
                    "monthlyPrice": p.monthly_price,
                    "maxMembers": p.max_members,
                    "features": list(p.features),
                }
                for p in SUBSCRIPTION_PLANS.values()
            ],
        }

    @staticmethod
    def handle_webhook_event(payload, signature):
        if not signature:
            raise ValidationError("Missing stripe-signature header")
        webhook_secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
        if not webhook_secret:
            current_app.logger.error("Stripe webhook secret not configured")
            raise PaymentError("Webhook secret not configured")

        try:
            stripe.Webhook.construct_event(payload, signature, webhook_secret)
            event = json.loads(payload)
        except stripe.SignatureVerificationError as e:
            current_app.logger.error(f"Invalid webhook signature: {str(e)}")
            raise ValidationError("Invalid signature")
        except ValueError as e:
            current_app.logger.error(f"Invalid webhook payload: {str(e)}")
            raise ValidationError("Invalid payload")

        event_type = event.get("type")
        obj = event.get("data", {}).get("object", {})
        current_app.logger.info(f"Stripe webhook received: {event_type}")

        if event_type == "customer.subscription.created":
            SubscriptionService.handle_subscription_created(obj)
        elif event_type == "customer.subscription.updated":
            SubscriptionService.handle_subscription_updated(obj)
        elif event_type == "customer.subscription.deleted":
            SubscriptionService.handle_subscription_deleted(obj)
        elif event_type == "invoice.payment_succeeded":
            current_app.logger.info(f"Payment succeeded for subscription: {obj.get('subscription')}")
        elif event_type == "invoice.payment_failed":
            current_app.logger.warning(f"Payment failed for subscription: {obj.get('subscription')}")
        else:
            current_app.logger.info(f"Unhandled webhook event type: {event_type}")

        return {"received": True}

    @staticmethod
    def _church_and_plan(subscription):
        metadata = _get(subscription, "metadata", {})
        church_id = _get(metadata, "churchId")
        plan_id = _get(metadata, "planId")
        church = ChurchRepository.find_by_id(int(church_id)) if church_id else None
        return church, plan_id

    @staticmethod
    def _upsert(church, plan_id, stripe_subscription):
        record = SubscriptionRepository.find_by_stripe_id(_get(stripe_subscription, "id"))
        if record is None:
            record = SubscriptionRepository.find_current_for_church(church.id)
        if record is None:
            record = Subscription(church_id=church.id)
        record.stripe_subscription_id = _get(stripe_subscription, "id")
        record.status = _get(stripe_subscription, "status", "active")
        record.plan_id = plan_id
        record.current_period_start = _period(stripe_subscription, "current_period_start")
        record.current_period_end = _period(stripe_subscription, "current_period_end")
        record.cancel_at_period_end = bool(_get(stripe_subscription, "cancel_at_period_end", False))
        db.session.add(record)
        return record

    @staticmethod
    def handle_subscription_created(stripe_subscription):
        church, plan_id = SubscriptionService._church_and_plan(stripe_subscription)
        if not church:
            raise ValidationError("No church ID in subscription metadata")
        plan = get_plan(plan_id)
        if not plan:
            raise ValidationError("Invalid plan ID in subscription metadata")

        church.subscription_tier = plan.id
        church.max_members = plan.max_members
        church.subscription_start_date = _period(stripe_subscription, "current_period_start")
        church.stripe_subscription_id = _get(stripe_subscription, "id")
        customer = _get(stripe_subscription, "customer")
        if isinstance(customer, str):
            church.stripe_customer_id = customer
        SubscriptionService._upsert(church, plan.id, stripe_subscription)
        db.session.commit()
        logger.info(f"Subscription created for church {church.id}: {plan.id}")

    @staticmethod
    def handle_subscription_updated(stripe_subscription):
        church, plan_id = SubscriptionService._church_and_plan(stripe_subscription)
        plan = get_plan(plan_id)
        if not church or not plan:
            logger.warning("Subscription update without usable church/plan metadata ignored")
            return
        church.subscription_tier = plan.id
        church.max_members = plan.max_members
        SubscriptionService._upsert(church, plan.id, stripe_subscription)
        db.session.commit()
        logger.info(f"Subscription updated for church {church.id}: {plan.id}")

    @staticmethod
    def handle_subscription_deleted(stripe_subscription):
        church, _ = SubscriptionService._church_and_plan(stripe_subscription)
        if not church:
            return
        church.subscription_tier = SubscriptionTier.TRIAL.value
        church.max_members = DEFAULT_MAX_MEMBERS
        record = SubscriptionRepository.find_by_stripe_id(_get(stripe_subscription, "id"))
        if record is None:
            record = SubscriptionRepository.find_current_for_church(church.id)
        if record is not None:
            record.status = "canceled"
        db.session.commit()
        logger.info(f"Subscription canceled for church {church.id}")

    @staticmethod
    def change_plan(church, new_plan_id):
        subscription = SubscriptionService._require_stripe_subscription(church.id)
        SubscriptionService._ensure_stripe_key()
        try:
            remote = stripe.Subscription.retrieve(subscription.stripe_subscription_id)
            item_id = remote["items"]["data"][0]["id"]
            metadata = dict(_get(remote, "metadata", {}) or {})
            metadata.update({"churchId": str(church.id), "planId": new_plan_id})
            updated = stripe.Subscription.modify(
                subscription.stripe_subscription_id,
                items=[{"id": item_id, "price": SubscriptionService.price_id_for(new_plan_id)}],
                metadata=metadata,
            )
        except stripe.StripeError as e:
            current_app.logger.error(f"Stripe error changing plan: {str(e)}")
            raise PaymentError("Failed to change subscription plan")

        SubscriptionService.handle_subscription_updated(updated)
        return {
            "success": True,
            "message": f"Subscription changed to {new_plan_id}",
            "subscription": SubscriptionRepository.find_current_for_church(church.id).to_dict(),
        }

    @staticmethod
    def _set_cancel_at_period_end(church, cancel, missing_message):
        subscription = SubscriptionService._require_stripe_subscription(church.id, missing_message)
        SubscriptionService._ensure_stripe_key()
        try:
            stripe.Subscription.modify(
                subscription.stripe_subscription_id, cancel_at_period_end=cancel
            )
        except stripe.StripeError as e:
            current_app.logger.error(f"Stripe error updating cancellation: {str(e)}")
            raise PaymentError("Failed to update subscription")
        subscription.cancel_at_period_end = cancel
        SubscriptionRepository.save(subscription)
        return subscription

    @staticmethod
    def cancel(church):
        subscription = SubscriptionService._set_cancel_at_period_end(
            church, True, "No active subscription found"
        )
        logger.info(f"Subscription for church {church.id} set to cancel at period end")
        return {
            "success": True,
            "message": "Subscription will be canceled at the end of the current period",
            "subscription": subscription.to_dict(),
        }

    @staticmethod
    def reactivate(church):
        subscription = SubscriptionService._set_cancel_at_period_end(
            church, False, "No subscription found"
        )
        logger.info(f"Subscription for church {church.id} reactivated")
        return {
            "success": True,
            "message": "Subscription reactivated",
            "subscription": subscription.to_dict(),
        }
