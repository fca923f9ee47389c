from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.extensions import limiter
from churchconnect.models import ChurchRole
from churchconnect.schemas import ExternalCheckIn, ExternalCheckInToggle, validate
from churchconnect.services.external_checkin_service import ExternalCheckInService

external_checkin_bp = Blueprint("external_checkin", __name__)

PUBLIC_LIMIT = "30 per minute"


def _base_url():
    proto = request.headers.get("X-Forwarded-Proto", request.scheme)
    return f"{proto}://{request.host}"


@external_checkin_bp.route("/events/<int:event_id>/external-checkin/toggle", methods=["POST"])
@church_user_required(roles=[ChurchRole.ADMIN.value])
def toggle_external_check_in(event_id):
    data = validate(ExternalCheckInToggle, request.get_json(silent=True))
    result = ExternalCheckInService.toggle(event_id, g.church_id, data.enabled, _base_url())
    return jsonify(result), 200


@external_checkin_bp.route("/events/<int:event_id>/external-checkin", methods=["GET"])
@church_user_required()
def get_external_check_in(event_id):
    return jsonify(ExternalCheckInService.get_details(event_id, g.church_id, _base_url())), 200


@external_checkin_bp.route("/<token>", methods=["GET"])
@limiter.limit(PUBLIC_LIMIT)
def get_check_in_page(token):
    return jsonify(ExternalCheckInService.get_public_page(token)), 200


@external_checkin_bp.route("/<token>/members", methods=["GET"])
@limiter.limit(PUBLIC_LIMIT)
def list_check_in_members(token):
    return jsonify(ExternalCheckInService.list_members(token, request.args.get("pin"))), 200


@external_checkin_bp.route("/<token>/checkin", methods=["POST"])
@limiter.limit(PUBLIC_LIMIT)
def external_check_in(token):
    data = validate(ExternalCheckIn, request.get_json(silent=True) or {})
    result = ExternalCheckInService.check_in(token, data.pin, data.member_id)
    return jsonify(result), 201
