from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.features import check_member_limit, require_feature
from churchconnect.models import ChurchRole
from churchconnect.schemas import (
    BulkUploadRequest,
    FingerprintEnroll,
    FingerprintScan,
    MemberCreate,
    MemberUpdate,
    validate,
)
from churchconnect.services.attendance_service import AttendanceService
from churchconnect.services.member_service import MemberService

member_bp = Blueprint("member", __name__)
fingerprint_bp = Blueprint("fingerprint", __name__)

STAFF = [ChurchRole.ADMIN.value, ChurchRole.VOLUNTEER.value]


@member_bp.route("", methods=["GET"])
@church_user_required()
@require_feature("member_management")
def list_members():
    members = MemberService.list_members(
        g.church_id,
        search=request.args.get("search"),
        group=request.args.get("group"),
    )
    return jsonify(members), 200


@member_bp.route("", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("member_management")
@check_member_limit
def create_member():
    data = validate(MemberCreate, request.get_json(silent=True))
    member = MemberService.create_member(g.church_id, data)
    return jsonify(member.to_dict()), 201


@member_bp.route("/bulk-upload", methods=["POST"])
@church_user_required(roles=[ChurchRole.ADMIN.value])
@require_feature("bulk_upload")
@check_member_limit
def bulk_upload():
    data = validate(BulkUploadRequest, request.get_json(silent=True))
    result = MemberService.bulk_upload(g.church, data.members)
    return jsonify(result), 201 if result["created"] else 200


@member_bp.route("/<int:member_id>", methods=["GET"])
@church_user_required()
@require_feature("member_management")
def get_member(member_id):
    member = MemberService.get_member_or_404(member_id, g.church_id)
    return jsonify(member.to_dict()), 200


@member_bp.route("/<int:member_id>", methods=["PUT", "PATCH"])
@church_user_required(roles=STAFF)
@require_feature("member_management")
def update_member(member_id):
    data = validate(MemberUpdate, request.get_json(silent=True))
    member = MemberService.update_member(member_id, g.church_id, data.changes())
    return jsonify(member.to_dict()), 200


@member_bp.route("/<int:member_id>", methods=["DELETE"])
@church_user_required(roles=STAFF)
@require_feature("member_management")
def delete_member(member_id):
    MemberService.delete_member(member_id, g.church_id)
    return jsonify({"message": "Member deleted successfully"}), 200


@member_bp.route("/<int:member_id>/children", methods=["GET"])
@member_bp.route("/children/<int:member_id>", methods=["GET"])
@church_user_required()
@require_feature("member_management")
def get_children(member_id):
    return jsonify(MemberService.get_children(member_id, g.church_id)), 200


@member_bp.route("/<int:member_id>/attendance", methods=["GET"])
@church_user_required()
@require_feature("member_management")
def get_member_attendance(member_id):
    limit = request.args.get("limit", 10, type=int)
    return jsonify(MemberService.get_attendance(member_id, g.church_id, limit=limit)), 200


@fingerprint_bp.route("/enroll", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("biometric_checkin")
def enroll_fingerprint():
    data = validate(FingerprintEnroll, request.get_json(silent=True))
    result = MemberService.enroll_fingerprint(g.church_id, data.member_id, data.fingerprint_id)
    return jsonify(result), 200


@fingerprint_bp.route("/scan", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("biometric_checkin")
def scan_fingerprint():
    data = validate(FingerprintScan, request.get_json(silent=True) or {})
    result = AttendanceService.scan_fingerprint(
        g.church_id, fingerprint_id=data.fingerprint_id, device_id=data.device_id
    )
    return jsonify(result), 200
