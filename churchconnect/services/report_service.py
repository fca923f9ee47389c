import json
import logging
from collections import Counter
from datetime import datetime, time, timedelta, timezone

from churchconnect.exceptions import NotFoundError
from churchconnect.models import CheckInMethod, ReportConfig, ReportRun
from churchconnect.models.enums import value_of
from churchconnect.repositories import (
    AttendanceRepository,
    FollowUpRepository,
    MemberRepository,
    ReportRepository,
)
from churchconnect.utils.dates import isoformat, today

logger = logging.getLogger(__name__)


def day_bounds(start, end):
    """UTC datetimes covering ``start`` through the end of ``end``."""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


def _grouped_counts(records):
    counts = Counter((r.attendance_date, value_of(r.member.gender)) for r in records)
    return [
        {"date": isoformat(day), "group": group, "count": count}
        for (day, group), count in sorted(counts.items())
    ]


def _member_records(church_id, start, end):
    return [
        r for r in AttendanceRepository.in_range(church_id, start, end) if r.member is not None
    ]


class ReportService:
    @staticmethod
    def weekly_attendance(church_id, start=None, end=None):
        end = end or today()
        start = start or end - timedelta(days=7)
        return _grouped_counts(_member_records(church_id, start, end))

    @staticmethod
    def group_attendance_trend(church_id, start=None, end=None):
        end = end or today()
        start = start or end - timedelta(days=30)
        rows = _grouped_counts(_member_records(church_id, start, end))
        return [
            {"group": r["group"], "attendanceDate": r["date"], "count": r["count"]}
            for r in rows
        ]

    @staticmethod
    def member_attendance_log(church_id, member_id=None, start=None, end=None):
        records = AttendanceRepository.history(
            church_id,
            start or datetime.min.date(),
            end or today(),
            member_id=member_id,
        )
        return [
            {
                "memberId": r.member_id,
                "memberName": r.member.full_name,
                "group": value_of(r.member.gender),
                "attendanceDate": isoformat(r.attendance_date),
                "checkInTime": isoformat(r.check_in_time),
                "checkInMethod": r.check_in_method,
            }
            for r in records
            if r.member is not None
        ]

    @staticmethod
    def _absent_members(church_id, cutoff, include_recent_absent_only):
        last_seen = AttendanceRepository.last_attendance_by_member(church_id)
        rows = []
        for member in MemberRepository.list_for_church(church_id):
            last = last_seen.get(member.id)
            if last is not None and last >= cutoff:
                continue
            if include_recent_absent_only and not member.is_current_member:
                continue
            rows.append(
                {
                    "id": member.id,
                    "firstName": member.first_name,
                    "surname": member.surname,
                    "group": value_of(member.gender),
                    "phone": member.phone,
                    "lastAttendance": isoformat(last),
                }
            )
        return rows

    @staticmethod
    def missed_services(church_id, weeks=3):
        cutoff = today() - timedelta(weeks=weeks)
        return ReportService._absent_members(church_id, cutoff, True)

    @staticmethod
    def inactive_members(church_id, weeks=4):
        cutoff = today() - timedelta(weeks=weeks)
        return ReportService._absent_members(church_id, cutoff, False)

    @staticmethod
    def new_members(church_id, start=None, end=None):
        end = end or today()
        start = start or end - timedelta(days=30)
        lower, upper = day_bounds(start, end)
        return [m.to_dict() for m in MemberRepository.created_between(church_id, lower, upper)]

    @staticmethod
    def family_check_in_summary(church_id, day=None):
        day = day or today()
        rows = []
        for record in AttendanceRepository.for_date(church_id, day):
            member = record.member
            if record.check_in_method != CheckInMethod.FAMILY.value or member is None:
                continue
            # the parent's own family row is not a child entry
            if not member.parent_id:
                continue
            parent = MemberRepository.find_in_church(member.parent_id, church_id)
            rows.append(
                {
                    "parentId": member.parent_id,
                    "parentName": parent.full_name if parent else None,
                    "childName": member.full_name,
                    "childGroup": value_of(member.age_group),
                    "checkInTime": isoformat(record.check_in_time),
                }
            )
        rows.sort(key=lambda r: r["checkInTime"] or "")
        return rows

    @staticmethod
    def follow_up_action_tracker(church_id):
        rows = [
            {
                "memberId": member.id,
                "memberName": member.full_name,
                "consecutiveAbsences": record.consecutive_absences,
                "lastContactDate": isoformat(record.last_contact_date),
                "contactMethod": record.contact_method,
                "needsFollowUp": record.needs_follow_up,
            }
            for member, record in FollowUpRepository.list_for_church(church_id)
        ]
        rows.sort(key=lambda r: r["lastContactDate"] or "", reverse=True)
        return rows

    # Report configs and runs

    @staticmethod
    def list_configs(church_id):
        return [c.to_dict() for c in ReportRepository.configs_for_church(church_id)]

    @staticmethod
    def create_config(church_id, data):
        config = ReportConfig(church_id=church_id, **data.model_dump())
        ReportRepository.save(config)
        return config.to_dict()

    @staticmethod
    def update_config(config_id, church_id, changes):
        config = ReportRepository.find_config(config_id, church_id)
        if not config:
            raise NotFoundError("Report config not found")
        for field, value in changes.items():
            if value is None and field in ("report_type", "title", "frequency", "is_active"):
                continue
            setattr(config, field, value)
        ReportRepository.save(config)
        return config.to_dict()

    @staticmethod
    def delete_config(config_id, church_id):
        config = ReportRepository.find_config(config_id, church_id)
        if not config:
            raise NotFoundError("Report config not found")
        ReportRepository.delete(config)

    @staticmethod
    def list_runs(church_id):
        return [r.to_dict() for r in ReportRepository.runs_for_church(church_id)]

    @staticmethod
    def create_run(church_id, user_id, data):
        if not ReportRepository.find_config(data.report_config_id, church_id):
            raise NotFoundError("Report config not found")
        run = ReportRun(
            church_id=church_id,
            report_config_id=data.report_config_id,
            run_by_id=user_id,
            parameters=json.dumps(data.parameters) if data.parameters is not None else None,
            file_path=data.file_path,
        )
        ReportRepository.save(run)
        logger.info(f"Report run {run.id} recorded for config {data.report_config_id}")
        return run.to_dict()
