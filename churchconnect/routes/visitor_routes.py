from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.features import require_feature
from churchconnect.models import ChurchRole
from churchconnect.schemas import VisitorCreate, VisitorUpdate, validate
from churchconnect.services.visitor_service import VisitorService

visitor_bp = Blueprint("visitor", __name__)

STAFF = [ChurchRole.ADMIN.value, ChurchRole.VOLUNTEER.value]


@visitor_bp.route("", methods=["GET"])
@church_user_required()
@require_feature("visitor_management")
def list_visitors():
    return jsonify(VisitorService.list_visitors(g.church_id, request.args.get("status"))), 200


@visitor_bp.route("", methods=["POST"])
@church_user_required(roles=STAFF)
@require_feature("visitor_management")
def create_visitor():
    data = validate(VisitorCreate, request.get_json(silent=True))
    visitor = VisitorService.create_visitor(g.church_id, data)
    return jsonify(visitor.to_dict()), 201


@visitor_bp.route("/<int:visitor_id>", methods=["GET"])
@church_user_required()
@require_feature("visitor_management")
def get_visitor(visitor_id):
    visitor = VisitorService.get_visitor_or_404(visitor_id, g.church_id)
    return jsonify(visitor.to_dict()), 200


@visitor_bp.route("/<int:visitor_id>", methods=["PATCH", "PUT"])
@church_user_required(roles=STAFF)
@require_feature("visitor_management")
def update_visitor(visitor_id):
    data = validate(VisitorUpdate, request.get_json(silent=True))
    visitor = VisitorService.update_visitor(visitor_id, g.church_id, data.changes())
    return jsonify(visitor.to_dict()), 200
