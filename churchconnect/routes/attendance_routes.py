from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.exceptions import MissingFieldsError
from churchconnect.features import require_feature
from churchconnect.models import ChurchRole
from churchconnect.schemas import (
    AttendanceCreate,
    FamilyCheckIn,
    KioskCheckIn,
    SelectiveFamilyCheckIn,
    VisitorCreate,
    validate,
)
from churchconnect.services.attendance_service import AttendanceService
from churchconnect.services.visitor_service import VisitorService
from churchconnect.utils.dates import parse_date, today

attendance_bp = Blueprint("attendance", __name__)
visitor_checkin_bp = Blueprint("visitor_checkin", __name__)

STAFF = [ChurchRole.ADMIN.value, ChurchRole.VOLUNTEER.value]


def _bool_arg(name):
    value = request.args.get(name)
    if value is None or value == "":
        return None
    return value.lower() in ("true", "1", "yes")


@attendance_bp.route("", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("basic_checkin")
def create_attendance():
    data = validate(AttendanceCreate, request.get_json(silent=True))
    record = AttendanceService.create_record(g.church_id, data)
    return jsonify(record), 201


@attendance_bp.route("/check-in/<int:member_id>", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("basic_checkin")
def kiosk_check_in(member_id):
    data = validate(KioskCheckIn, request.get_json(silent=True) or {})
    result = AttendanceService.kiosk_check_in(g.church, member_id, data.event_id)
    return jsonify(result), 201


@attendance_bp.route("/<int:record_id>", methods=["DELETE"])
@church_user_required(roles=STAFF)
def delete_attendance(record_id):
    AttendanceService.delete_record(record_id, g.church_id)
    return jsonify({"message": "Attendance record deleted successfully"}), 200


@attendance_bp.route("/today", methods=["GET"])
@church_user_required()
def get_today():
    return jsonify(AttendanceService.get_today(g.church_id)), 200


@attendance_bp.route("/stats", methods=["GET"])
@church_user_required()
def get_stats():
    day = parse_date(request.args.get("date"), "date") or today()
    return jsonify(AttendanceService.get_stats(g.church_id, day)), 200


@attendance_bp.route("/history", methods=["GET"])
@church_user_required()
@require_feature("history_tracking")
def get_history():
    missing = [name for name in ("startDate", "endDate") if not request.args.get(name)]
    if missing:
        raise MissingFieldsError(missing)

    records = AttendanceService.get_history(
        g.church_id,
        parse_date(request.args["startDate"], "startDate"),
        parse_date(request.args["endDate"], "endDate"),
        member_id=request.args.get("memberId", type=int),
        gender=request.args.get("gender") or None,
        age_group=request.args.get("ageGroup") or None,
        is_current_member=_bool_arg("isCurrentMember"),
    )
    return jsonify(records), 200


@attendance_bp.route("/date-range", methods=["GET"])
@church_user_required()
def get_date_range():
    return jsonify(AttendanceService.get_date_range(g.church_id)), 200


@attendance_bp.route("/stats-range", methods=["GET"])
@church_user_required()
def get_stats_range():
    missing = [name for name in ("startDate", "endDate") if not request.args.get(name)]
    if missing:
        raise MissingFieldsError(missing)
    stats = AttendanceService.get_stats_range(
        g.church_id,
        parse_date(request.args["startDate"], "startDate"),
        parse_date(request.args["endDate"], "endDate"),
    )
    return jsonify(stats), 200


@attendance_bp.route("/family-checkin", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("family_checkin")
def family_check_in():
    data = validate(FamilyCheckIn, request.get_json(silent=True))
    result = AttendanceService.family_check_in(g.church_id, data.parent_id, data.event_id)
    return jsonify(result), 201


@attendance_bp.route("/selective-family-checkin", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("family_checkin")
def selective_family_check_in():
    data = validate(SelectiveFamilyCheckIn, request.get_json(silent=True))
    result = AttendanceService.family_check_in(
        g.church_id, data.parent_id, data.event_id, children_ids=data.children_ids
    )
    return jsonify(result), 201


@attendance_bp.route("/fix-visitor-member-records", methods=["POST"])
@church_user_required(roles=[ChurchRole.ADMIN.value])
def fix_visitor_member_records():
    return jsonify(AttendanceService.fix_visitor_member_records(g.church_id)), 200


@visitor_checkin_bp.route("", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("visitor_management")
def visitor_check_in():
    data = validate(VisitorCreate, request.get_json(silent=True))
    return jsonify(VisitorService.check_in_visitor(g.church_id, data)), 201
