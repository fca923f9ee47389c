import json

from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import ReportFrequency


class ReportConfig(db.Model):
    __tablename__ = "report_configs"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer, db.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False
    )
    report_type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    frequency = db.Column(
        db.String(20), nullable=False, default=ReportFrequency.ON_DEMAND.value
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )

    def to_dict(self):
        return {
            "id": self.id,
            "reportType": self.report_type,
            "title": self.title,
            "description": self.description,
            "frequency": self.frequency,
            "isActive": self.is_active,
            "createdAt": isoformat(self.created_at),
        }


class ReportRun(db.Model):
    __tablename__ = "report_runs"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer, db.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False
    )
    report_config_id = db.Column(
        db.Integer,
        db.ForeignKey("report_configs.id", ondelete="CASCADE"),
        nullable=False,
    )
    run_by_id = db.Column(
        db.Integer, db.ForeignKey("church_users.id", ondelete="SET NULL"), nullable=True
    )
    generated_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    parameters = db.Column(db.Text, nullable=True)
    file_path = db.Column(db.Text, nullable=True)

    report_config = db.relationship("ReportConfig")

    def to_dict(self):
        return {
            "id": self.id,
            "reportConfigId": self.report_config_id,
            "reportTitle": self.report_config.title if self.report_config else None,
            "runById": self.run_by_id,
            "generatedAt": isoformat(self.generated_at),
            "parameters": json.loads(self.parameters) if self.parameters else None,
            "filePath": self.file_path,
        }


class PlatformReport(db.Model):
    """Platform-wide report generated from the super-admin console."""

    __tablename__ = "platform_reports"

    id = db.Column(db.Integer, primary_key=True)
    report_type = db.Column(db.String(30), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="completed")
    date_range = db.Column(db.String(20), nullable=True)
    content = db.Column(db.Text, nullable=False)
    generated_by_id = db.Column(
        db.Integer, db.ForeignKey("super_admins.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )

    @property
    def size(self):
        kb = len(self.content.encode("utf-8")) / 1024
        return f"{kb:.1f} KB"

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.report_type,
            "title": self.title,
            "status": self.status,
            "dateRange": self.date_range,
            "size": self.size,
            "createdAt": isoformat(self.created_at),
        }
