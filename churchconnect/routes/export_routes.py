from flask import Blueprint, Response, g, request

from churchconnect.auth import church_user_required
from churchconnect.services.export_service import ExportService
from churchconnect.utils.dates import parse_date

export_bp = Blueprint("export", __name__)


def _csv_response(content, filename):
    return Response(
        content,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@export_bp.route("/members", methods=["GET"])
@church_user_required()
def export_members():
    return _csv_response(*ExportService.members_csv(g.church_id))


@export_bp.route("/visitors", methods=["GET"])
@church_user_required()
def export_visitors():
    return _csv_response(*ExportService.visitors_csv(g.church_id))


@export_bp.route("/attendance", methods=["GET"])
@church_user_required()
def export_attendance():
    start = parse_date(request.args.get("startDate") or None, "startDate")
    end = parse_date(request.args.get("endDate") or None, "endDate") or start
    return _csv_response(*ExportService.attendance_csv(g.church_id, start, end))


@export_bp.route("/monthly-report", methods=["GET"])
@church_user_required()
def export_monthly_report():
    month = request.args.get("month", type=int)
    year = request.args.get("year", type=int)
    return _csv_response(*ExportService.monthly_report_csv(g.church_id, month, year))
