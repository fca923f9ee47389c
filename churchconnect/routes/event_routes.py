from flask import Blueprint, g, jsonify, request

from churchconnect.auth import church_user_required
from churchconnect.models import ChurchRole
from churchconnect.schemas import EventCreate, EventUpdate, validate
from churchconnect.services.event_service import EventService

event_bp = Blueprint("event", __name__)

ADMIN_ONLY = [ChurchRole.ADMIN.value]


@event_bp.route("", methods=["GET"])
@church_user_required()
def list_events():
    return jsonify(EventService.list_events(g.church_id)), 200


@event_bp.route("/active", methods=["GET"])
@church_user_required()
def list_active_events():
    return jsonify(EventService.list_events(g.church_id, active_only=True)), 200


@event_bp.route("/attendance-counts", methods=["GET"])
@church_user_required()
def attendance_counts():
    return jsonify(EventService.attendance_counts(g.church_id)), 200


@event_bp.route("", methods=["POST"])
@church_user_required(roles=ADMIN_ONLY)
def create_event():
    data = validate(EventCreate, request.get_json(silent=True))
    event = EventService.create_event(g.church_id, data)
    return jsonify(event.to_dict()), 201


@event_bp.route("/<int:event_id>", methods=["GET"])
@church_user_required()
def get_event(event_id):
    return jsonify(EventService.get_event_or_404(event_id, g.church_id).to_dict()), 200


@event_bp.route("/<int:event_id>", methods=["PUT", "PATCH"])
@church_user_required(roles=ADMIN_ONLY)
def update_event(event_id):
    data = validate(EventUpdate, request.get_json(silent=True))
    event = EventService.update_event(event_id, g.church_id, data.changes())
    return jsonify(event.to_dict()), 200


@event_bp.route("/<int:event_id>", methods=["DELETE"])
@church_user_required(roles=ADMIN_ONLY)
def delete_event(event_id):
    EventService.delete_event(event_id, g.church_id)
    return jsonify({"message": "Event deleted successfully"}), 200


@event_bp.route("/<int:event_id>/attendance-stats", methods=["GET"])
@church_user_required()
def attendance_stats(event_id):
    return jsonify(EventService.attendance_stats(event_id, g.church_id)), 200
