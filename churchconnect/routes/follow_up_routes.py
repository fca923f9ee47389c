from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.features import require_feature
from churchconnect.models import ChurchRole
from churchconnect.schemas import FollowUpContact, validate
from churchconnect.services.follow_up_service import FollowUpService

follow_up_bp = Blueprint("follow_up", __name__)

STAFF = [ChurchRole.ADMIN.value, ChurchRole.VOLUNTEER.value]


@follow_up_bp.route("", methods=["GET"])
@church_user_required()
@require_feature("follow_up_queue")
def members_needing_follow_up():
    return jsonify(FollowUpService.members_needing_follow_up(g.church_id)), 200


@follow_up_bp.route("/update-absences", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("follow_up_queue")
def update_absences():
    return jsonify(FollowUpService.update_absences(g.church_id)), 200


@follow_up_bp.route("/<int:member_id>", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("follow_up_queue")
def record_contact(member_id):
    data = validate(FollowUpContact, request.get_json(silent=True))
    return jsonify(FollowUpService.record_contact(g.church_id, member_id, data.method)), 200
