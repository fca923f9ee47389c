from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.models import ChurchRole
from churchconnect.schemas import ChurchUserCreate, ChurchUserUpdate, validate
from churchconnect.services.church_user_service import ChurchUserService

church_user_bp = Blueprint("church_user", __name__)

ADMIN_ONLY = [ChurchRole.ADMIN.value]


@church_user_bp.route("", methods=["GET"])
@church_user_required()
def list_users():
    return jsonify(ChurchUserService.list_users(g.church_id)), 200


@church_user_bp.route("/<int:user_id>", methods=["GET"])
@church_user_required()
def get_user(user_id):
    return jsonify(ChurchUserService.get_user(user_id, g.church_id)), 200


@church_user_bp.route("", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def create_user():
    data = validate(ChurchUserCreate, request.get_json(silent=True))
    return jsonify(ChurchUserService.create_user(g.church_id, data)), 201


@church_user_bp.route("/<int:user_id>", methods=["PUT", "PATCH"])
@church_user_required(roles=ADMIN_ONLY)
def update_user(user_id):
    data = validate(ChurchUserUpdate, request.get_json(silent=True))
    return jsonify(ChurchUserService.update_user(user_id, g.church_id, data.changes())), 200


@church_user_bp.route("/<int:user_id>", methods=["DELETE"])
@church_user_required(roles=ADMIN_ONLY)
def delete_user(user_id):
    ChurchUserService.delete_user(user_id, g.church_id, g.user_id)
    return jsonify({"message": "User deleted successfully"}), 200
