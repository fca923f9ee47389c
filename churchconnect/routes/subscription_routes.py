from flask import Blueprint, current_app, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.exceptions import ChurchConnectError
from churchconnect.extensions import db, limiter
from churchconnect.models import ChurchRole
from churchconnect.schemas import ChangePlanRequest, CheckoutRequest, PortalRequest, validate
from churchconnect.services.subscription_service import SubscriptionService

subscription_bp = Blueprint("subscription", __name__)

ADMIN_ONLY = [ChurchRole.ADMIN.value]


@subscription_bp.route("/config", methods=["GET"])
def get_config():
    return jsonify(SubscriptionService.get_stripe_config()), 200


@subscription_bp.route("/checkout", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def create_checkout_session():
    data = validate(CheckoutRequest, request.get_json(silent=True))
    result = SubscriptionService.create_checkout_session(
        g.church, g.user_id, data.plan_id, data.success_url, data.cancel_url
    )
    return jsonify(result), 200


@subscription_bp.route("/portal", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def create_portal_session():
    data = validate(PortalRequest, request.get_json(silent=True))
    return jsonify(SubscriptionService.create_portal_session(g.church, data.return_url)), 200


@subscription_bp.route("/status", methods=["GET"])
@church_user_required()
def get_status():
    return jsonify(SubscriptionService.get_status(g.church)), 200


@subscription_bp.route("/webhook", methods=["POST"])
@limiter.exempt
def stripe_webhook():
    """Handle Stripe webhook events"""
    payload = request.get_data(as_text=True)
    signature = request.headers.get("Stripe-Signature")
    try:
        result = SubscriptionService.handle_webhook_event(payload, signature)
    except ChurchConnectError:
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error handling Stripe webhook: {str(e)}")
        return jsonify({"error": "Webhook processing failed"}), 400
    return jsonify(result), 200


@subscription_bp.route("/change-plan", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def change_plan():
    data = validate(ChangePlanRequest, request.get_json(silent=True))
    return jsonify(SubscriptionService.change_plan(g.church, data.new_plan_id)), 200


@subscription_bp.route("/cancel", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def cancel_subscription():
    return jsonify(SubscriptionService.cancel(g.church)), 200


@subscription_bp.route("/reactivate", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def reactivate_subscription():
    return jsonify(SubscriptionService.reactivate(g.church)), 200
