from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.extensions import limiter
from churchconnect.features import require_feature
from churchconnect.models import ChurchRole
from churchconnect.schemas import (
    BrandingUpdate,
    ChurchRegistration,
    ChurchSettingsUpdate,
    KioskSettingsUpdate,
    LoginRequest,
    SubdomainCheck,
    validate,
)
from churchconnect.services.church_service import ChurchService

church_bp = Blueprint("church", __name__)

ADMIN_ONLY = [ChurchRole.ADMIN.value]


@church_bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    data = validate(ChurchRegistration, request.get_json(silent=True))
    result = ChurchService.register(data)
    return jsonify(result), 201


@church_bp.route("/login", methods=["POST"])
@limiter.limit("20 per minute")
def login():
    data = validate(LoginRequest, request.get_json(silent=True))
    result = ChurchService.login(data.email, data.password)
    return jsonify(result), 200


@church_bp.route("/me", methods=["GET"])
@church_user_required()
def get_current_church():
    return jsonify(ChurchService.get_current(g.church, g.user_id)), 200


@church_bp.route("/settings", methods=["PUT"])
@church_user_required(roles=ADMIN_ONLY)
def update_settings():
    data = validate(ChurchSettingsUpdate, request.get_json(silent=True))
    church = ChurchService.update_settings(g.church, data.changes())
    return jsonify({"message": "Settings updated successfully", "church": church}), 200


@church_bp.route("/kiosk-settings", methods=["GET"])
@church_user_required()
def get_kiosk_settings():
    return jsonify(ChurchService.get_kiosk_settings(g.church)), 200


@church_bp.route("/kiosk-settings", methods=["PATCH"])
@church_user_required(roles=ADMIN_ONLY)
def update_kiosk_settings():
    data = validate(KioskSettingsUpdate, request.get_json(silent=True))
    return jsonify(ChurchService.update_kiosk_settings(g.church, data.changes())), 200


@church_bp.route("/kiosk/start", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def start_kiosk_session():
    return jsonify(ChurchService.start_kiosk_session(g.church)), 200


@church_bp.route("/kiosk/end", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def end_kiosk_session():
    return jsonify(ChurchService.end_kiosk_session(g.church)), 200


@church_bp.route("/kiosk/status", methods=["GET"])
@church_user_required()
def kiosk_status():
    return jsonify(ChurchService.kiosk_status(g.church)), 200


@church_bp.route("/features", methods=["GET"])
@church_user_required()
def get_features():
    return jsonify(ChurchService.get_features(g.church)), 200


@church_bp.route("/usage", methods=["GET"])
@church_user_required()
def get_usage():
    return jsonify(ChurchService.get_usage(g.church)), 200


@church_bp.route("/check-subdomain", methods=["POST"])
def check_subdomain():
    data = validate(SubdomainCheck, request.get_json(silent=True))
    return jsonify(ChurchService.check_subdomain(data.subdomain)), 200


@church_bp.route("/branding", methods=["GET"])
@church_user_required()
def get_branding():
    return jsonify(ChurchService.get_branding(g.church)), 200


@church_bp.route("/branding", methods=["PUT"])
@church_user_required(roles=ADMIN_ONLY)
@require_feature("custom_branding")
def update_branding():
    data = validate(BrandingUpdate, request.get_json(silent=True))
    branding = ChurchService.update_branding(g.church, data.changes())
    return jsonify({"message": "Branding updated successfully", **branding}), 200
