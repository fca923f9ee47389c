from churchconnect.extensions import db
from churchconnect.models import PlatformReport, ReportConfig, ReportRun


class ReportRepository:
    @staticmethod
    def save(obj):
        db.session.add(obj)
        db.session.commit()
        return obj

    @staticmethod
    def delete(obj):
        db.session.delete(obj)
        db.session.commit()

    @staticmethod
    def configs_for_church(church_id):
        return (
            ReportConfig.query.filter_by(church_id=church_id)
            .order_by(ReportConfig.created_at.desc())
            .all()
        )

    @staticmethod
    def find_config(config_id, church_id):
        return ReportConfig.query.filter_by(id=config_id, church_id=church_id).first()

    @staticmethod
    def runs_for_church(church_id):
        return (
            ReportRun.query.filter_by(church_id=church_id)
            .order_by(ReportRun.generated_at.desc(), ReportRun.id.desc())
            .all()
        )

    @staticmethod
    def platform_reports():
        return PlatformReport.query.order_by(
            PlatformReport.created_at.desc(), PlatformReport.id.desc()
        ).all()

    @staticmethod
    def find_platform_report(report_id):
        return db.session.get(PlatformReport, report_id)

    @staticmethod
    def count_runs_since(church_id, since):
        return ReportRun.query.filter(
            ReportRun.church_id == church_id, ReportRun.generated_at >= since
        ).count()
