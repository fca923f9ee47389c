from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from churchconnect.extensions import db
from churchconnect.models import AttendanceRecord, Member


class AttendanceRepository:
    @staticmethod
    def create(record):
        db.session.add(record)
        db.session.commit()
        return record

    @staticmethod
    def delete(record):
        db.session.delete(record)
        db.session.commit()

    @staticmethod
    def find_in_church(record_id, church_id):
        return AttendanceRecord.query.filter_by(id=record_id, church_id=church_id).first()

    @staticmethod
    def find_duplicate(church_id, attendance_date, member_id=None, visitor_id=None, event_id=None):
        query = AttendanceRecord.query.filter_by(
            church_id=church_id, attendance_date=attendance_date
        )
        if member_id is not None:
            query = query.filter(AttendanceRecord.member_id == member_id)
        else:
            query = query.filter(AttendanceRecord.visitor_id == visitor_id)
        if event_id is None:
            query = query.filter(AttendanceRecord.event_id.is_(None))
        else:
            query = query.filter(AttendanceRecord.event_id == event_id)
        return query.first()

    @staticmethod
    def for_date(church_id, day):
        return (
            AttendanceRecord.query.options(joinedload(AttendanceRecord.member))
            .filter_by(church_id=church_id, attendance_date=day)
            .order_by(AttendanceRecord.check_in_time.desc(), AttendanceRecord.id.desc())
            .all()
        )

    @staticmethod
    def in_range(church_id, start, end):
        return (
            AttendanceRecord.query.options(joinedload(AttendanceRecord.member))
            .filter(
                AttendanceRecord.church_id == church_id,
                AttendanceRecord.attendance_date >= start,
                AttendanceRecord.attendance_date <= end,
            )
            .order_by(AttendanceRecord.attendance_date, AttendanceRecord.check_in_time)
            .all()
        )

    @staticmethod
    def history(church_id, start, end, member_id=None, gender=None, age_group=None,
                is_current_member=None):
        query = (
            AttendanceRecord.query.outerjoin(Member, AttendanceRecord.member_id == Member.id)
            .options(joinedload(AttendanceRecord.member), joinedload(AttendanceRecord.event))
            .filter(
                AttendanceRecord.church_id == church_id,
                AttendanceRecord.attendance_date >= start,
                AttendanceRecord.attendance_date <= end,
            )
        )
        if member_id is not None:
            query = query.filter(AttendanceRecord.member_id == member_id)
        if gender:
            query = query.filter(
                or_(Member.gender == gender, AttendanceRecord.visitor_gender == gender)
            )
        if age_group:
            query = query.filter(
                or_(
                    Member.age_group == age_group,
                    AttendanceRecord.visitor_age_group == age_group,
                )
            )
        if is_current_member is not None:
            query = query.filter(Member.is_current_member.is_(is_current_member))
        return query.order_by(
            AttendanceRecord.attendance_date.desc(), AttendanceRecord.check_in_time.desc()
        ).all()

    @staticmethod
    def date_range(church_id):
        return (
            db.session.query(
                db.func.min(AttendanceRecord.attendance_date),
                db.func.max(AttendanceRecord.attendance_date),
            )
            .filter(AttendanceRecord.church_id == church_id)
            .one()
        )

    @staticmethod
    def for_member(member_id, church_id, limit=None):
        query = AttendanceRecord.query.filter_by(
            member_id=member_id, church_id=church_id
        ).order_by(AttendanceRecord.attendance_date.desc(), AttendanceRecord.check_in_time.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def for_visitor(visitor_id, church_id):
        return AttendanceRecord.query.filter_by(
            visitor_id=visitor_id, church_id=church_id
        ).all()

    @staticmethod
    def for_event(event_id, church_id):
        return (
            AttendanceRecord.query.options(joinedload(AttendanceRecord.member))
            .filter_by(event_id=event_id, church_id=church_id)
            .all()
        )

    @staticmethod
    def counts_by_event(church_id):
        rows = (
            db.session.query(AttendanceRecord.event_id, db.func.count(AttendanceRecord.id))
            .filter(
                AttendanceRecord.church_id == church_id,
                AttendanceRecord.event_id.isnot(None),
            )
            .group_by(AttendanceRecord.event_id)
            .all()
        )
        return {event_id: count for event_id, count in rows}

    @staticmethod
    def last_attendance_by_member(church_id):
        rows = (
            db.session.query(
                AttendanceRecord.member_id, db.func.max(AttendanceRecord.attendance_date)
            )
            .filter(
                AttendanceRecord.church_id == church_id,
                AttendanceRecord.member_id.isnot(None),
            )
            .group_by(AttendanceRecord.member_id)
            .all()
        )
        return {member_id: last_date for member_id, last_date in rows}

    @staticmethod
    def count_for_church(church_id):
        return AttendanceRecord.query.filter_by(church_id=church_id).count()

    @staticmethod
    def count_all(since=None):
        query = AttendanceRecord.query
        if since is not None:
            query = query.filter(AttendanceRecord.attendance_date >= since)
        return query.count()
