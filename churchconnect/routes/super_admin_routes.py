from flask import Blueprint, Response, g, jsonify, request

from churchconnect.auth import super_admin_required
from churchconnect.extensions import limiter
from churchconnect.models import SuperAdminRole
from churchconnect.schemas import (
    BulkChurchAction,
    ChurchStatusUpdate,
    GenerateReportRequest,
    LoginRequest,
    SuperAdminCreate,
    validate,
)
from churchconnect.services.super_admin_service import SuperAdminService

super_admin_bp = Blueprint("super_admin", __name__)

PLATFORM_ADMINS = [SuperAdminRole.SUPER_ADMIN.value, SuperAdminRole.PLATFORM_ADMIN.value]


@super_admin_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    data = validate(LoginRequest, request.get_json(silent=True))
    return jsonify(SuperAdminService.login(data.email, data.password)), 200


@super_admin_bp.route("/dashboard", methods=["GET"])
@super_admin_required()
def dashboard():
    return jsonify(SuperAdminService.dashboard()), 200


@super_admin_bp.route("/churches", methods=["GET"])
@super_admin_required()
def list_churches():
    return jsonify(SuperAdminService.list_churches()), 200


@super_admin_bp.route("/churches/<int:church_id>", methods=["GET"])
@super_admin_required()
def get_church(church_id):
    return jsonify(SuperAdminService.get_church(church_id)), 200


@super_admin_bp.route("/churches/<int:church_id>/status", methods=["PATCH"])
@super_admin_required(roles=PLATFORM_ADMINS)
def update_church_status(church_id):
    data = validate(ChurchStatusUpdate, request.get_json(silent=True))
    return jsonify(SuperAdminService.update_church_status(church_id, data.is_active)), 200


@super_admin_bp.route("/bulk-church-action", methods=["POST"])
@super_admin_required(roles=PLATFORM_ADMINS)
def bulk_church_action():
    data = validate(BulkChurchAction, request.get_json(silent=True))
    return jsonify(SuperAdminService.bulk_church_action(data.church_ids, data.action)), 200


@super_admin_bp.route("/revenue-metrics", methods=["GET"])
@super_admin_required()
def revenue_metrics():
    return jsonify(SuperAdminService.revenue_metrics()), 200


@super_admin_bp.route("/subscription-metrics", methods=["GET"])
@super_admin_required()
def subscription_metrics():
    return jsonify(SuperAdminService.subscription_metrics()), 200


@super_admin_bp.route("/churn-analysis", methods=["GET"])
@super_admin_required()
def churn_analysis():
    return jsonify(SuperAdminService.churn_analysis()), 200


@super_admin_bp.route("/platform-analytics", methods=["GET"])
@super_admin_required()
def platform_analytics():
    return jsonify(SuperAdminService.platform_analytics()), 200


@super_admin_bp.route("/reports", methods=["GET"])
@super_admin_required()
def list_reports():
    return jsonify(SuperAdminService.list_reports()), 200


@super_admin_bp.route("/generate-report", methods=["POST"])
@super_admin_required()
def generate_report():
    data = validate(GenerateReportRequest, request.get_json(silent=True))
    return jsonify(SuperAdminService.generate_report(data, g.super_admin.id)), 201


@super_admin_bp.route("/reports/<int:report_id>/download", methods=["GET"])
@super_admin_required()
def download_report(report_id):
    content, filename = SuperAdminService.download_report(report_id)
    return Response(
        content,
        mimetype="text/plain",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@super_admin_bp.route("/system-health", methods=["GET"])
@super_admin_required()
def system_health():
    return jsonify(SuperAdminService.system_health()), 200


@super_admin_bp.route("/admin-users", methods=["GET"])
@super_admin_required()
def list_admin_users():
    return jsonify(SuperAdminService.list_admin_users()), 200


@super_admin_bp.route("/admin-users", methods=["POST"])
@super_admin_required(roles=[SuperAdminRole.SUPER_ADMIN.value])
def create_admin_user():
    data = validate(SuperAdminCreate, request.get_json(silent=True))
    return jsonify(SuperAdminService.create_admin_user(data)), 201
