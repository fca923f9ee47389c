from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.features import require_feature
from churchconnect.models import ChurchRole
from churchconnect.schemas import (
    ReportConfigCreate,
    ReportConfigUpdate,
    ReportRunCreate,
    validate,
)
from churchconnect.services.report_service import ReportService
from churchconnect.utils.dates import parse_date

report_bp = Blueprint("report", __name__)
report_admin_bp = Blueprint("report_admin", __name__)

ADMIN_ONLY = [ChurchRole.ADMIN.value]


def _date_args():
    return (
        parse_date(request.args.get("startDate") or None, "startDate"),
        parse_date(request.args.get("endDate") or None, "endDate"),
    )


@report_bp.route("/weekly-attendance", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def weekly_attendance():
    start, end = _date_args()
    return jsonify(ReportService.weekly_attendance(g.church_id, start, end)), 200


@report_bp.route("/member-attendance-log", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def member_attendance_log():
    start, end = _date_args()
    rows = ReportService.member_attendance_log(
        g.church_id, request.args.get("memberId", type=int), start, end
    )
    return jsonify(rows), 200


@report_bp.route("/missed-services", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def missed_services():
    weeks = request.args.get("weeks", 3, type=int)
    return jsonify(ReportService.missed_services(g.church_id, weeks)), 200


@report_bp.route("/new-members", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def new_members():
    start, end = _date_args()
    return jsonify(ReportService.new_members(g.church_id, start, end)), 200


@report_bp.route("/inactive-members", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def inactive_members():
    weeks = request.args.get("weeks", 4, type=int)
    return jsonify(ReportService.inactive_members(g.church_id, weeks)), 200


@report_bp.route("/group-attendance-trend", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def group_attendance_trend():
    start, end = _date_args()
    return jsonify(ReportService.group_attendance_trend(g.church_id, start, end)), 200


@report_bp.route("/family-checkin-summary", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def family_check_in_summary():
    day = parse_date(request.args.get("date") or None, "date")
    return jsonify(ReportService.family_check_in_summary(g.church_id, day)), 200


@report_bp.route("/followup-action-tracker", methods=["GET"])
@church_user_required()
@require_feature("basic_reports")
def follow_up_action_tracker():
    return jsonify(ReportService.follow_up_action_tracker(g.church_id)), 200


@report_admin_bp.route("/report-configs", methods=["GET"])
@church_user_required()
def list_report_configs():
    return jsonify(ReportService.list_configs(g.church_id)), 200


@report_admin_bp.route("/report-configs", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def create_report_config():
    data = validate(ReportConfigCreate, request.get_json(silent=True))
    return jsonify(ReportService.create_config(g.church_id, data)), 201


@report_admin_bp.route("/report-configs/<int:config_id>", methods=["PUT", "PATCH"])
@church_user_required(roles=ADMIN_ONLY)
def update_report_config(config_id):
    data = validate(ReportConfigUpdate, request.get_json(silent=True))
    return jsonify(ReportService.update_config(config_id, g.church_id, data.changes())), 200


@report_admin_bp.route("/report-configs/<int:config_id>", methods=["DELETE"])
@church_user_required(roles=ADMIN_ONLY)
def delete_report_config(config_id):
    ReportService.delete_config(config_id, g.church_id)
    return jsonify({"message": "Report config deleted successfully"}), 200


@report_admin_bp.route("/report-runs", methods=["GET"])
@church_user_required()
def list_report_runs():
    return jsonify(ReportService.list_runs(g.church_id)), 200


@report_admin_bp.route("/report-runs", methods=["POST"])
@church_user_required()
@require_feature("basic_reports", usage_field="monthly_reports")
def create_report_run():
    data = validate(ReportRunCreate, request.get_json(silent=True))
    return jsonify(ReportService.create_run(g.church_id, g.user_id, data)), 201
