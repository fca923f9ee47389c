import logging
from collections import Counter

from sqlalchemy.exc import IntegrityError

from churchconnect.exceptions import (
    DuplicateCheckInError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from churchconnect.extensions import db
from churchconnect.models import AttendanceRecord, CheckInMethod
from churchconnect.models.enums import value_of
from churchconnect.repositories import (
    AttendanceRepository,
    EventRepository,
    MemberRepository,
    VisitorRepository,
)
from churchconnect.utils.dates import isoformat, today

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = (
    "Member has already checked in today. Only one check-in per day is allowed."
)


def demographic_counts(records):
    genders = Counter(value_of(r.attendee_gender) for r in records)
    age_groups = Counter(value_of(r.attendee_age_group) for r in records)
    return {
        "male": genders.get("male", 0),
        "female": genders.get("female", 0),
        "child": age_groups.get("child", 0),
        "adolescent": age_groups.get("adolescent", 0),
        "adult": age_groups.get("adult", 0),
    }


class AttendanceService:
    @staticmethod
    def check_in(church_id, member=None, visitor=None, event_id=None, attendance_date=None,
                 method=CheckInMethod.MANUAL.value, is_guest=False, visitor_name=None,
                 visitor_gender=None, visitor_age_group=None, duplicate_status=400):
        """Write one attendance row, enforcing one check-in per person per event per day."""
        attendance_date = attendance_date or today()
        duplicate = AttendanceRepository.find_duplicate(
            church_id,
            attendance_date,
            member_id=member.id if member else None,
            visitor_id=visitor.id if visitor else None,
            event_id=event_id,
        )
        if duplicate:
            logger.info(
                f"Duplicate check-in rejected for "
                f"{'member ' + str(member.id) if member else 'visitor ' + str(visitor.id)} "
                f"on {attendance_date}"
            )
            raise DuplicateCheckInError(
                DUPLICATE_MESSAGE, status_code=duplicate_status, existingRecordId=duplicate.id
            )

        record = AttendanceRecord(
            church_id=church_id,
            member_id=member.id if member else None,
            visitor_id=visitor.id if visitor else None,
            event_id=event_id,
            attendance_date=attendance_date,
            check_in_method=method,
            is_guest=is_guest,
            visitor_name=visitor_name,
            visitor_gender=visitor_gender,
            visitor_age_group=visitor_age_group,
        )
        try:
            AttendanceRepository.create(record)
        except IntegrityError:
            db.session.rollback()
            raise DuplicateCheckInError(DUPLICATE_MESSAGE, status_code=duplicate_status)

        logger.info(
            f"Check-in recorded: church={church_id} member={record.member_id} "
            f"visitor={record.visitor_id} event={event_id} method={method}"
        )
        return record

    @staticmethod
    def _event_or_none(event_id, church_id):
        if event_id is None:
            return None
        event = EventRepository.find_in_church(event_id, church_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    @staticmethod
    def create_record(church_id, data):
        AttendanceService._event_or_none(data.event_id, church_id)
        member = visitor = None
        if data.member_id:
            member = MemberRepository.find_in_church(data.member_id, church_id)
            if not member:
                raise NotFoundError("Member not found")
        else:
            visitor = VisitorRepository.find_in_church(data.visitor_id, church_id)
            if not visitor:
                raise NotFoundError("Visitor not found")

        record = AttendanceService.check_in(
            church_id,
            member=member,
            visitor=visitor,
            event_id=data.event_id,
            attendance_date=data.attendance_date,
            method=data.check_in_method,
            is_guest=data.is_guest or visitor is not None,
            visitor_name=data.visitor_name,
            visitor_gender=data.visitor_gender,
            visitor_age_group=data.visitor_age_group,
        )
        return record.to_dict()

    @staticmethod
    def kiosk_check_in(church, member_id, event_id=None):
        from churchconnect.services.church_service import ChurchService

        if church.kiosk_mode_enabled and not ChurchService.kiosk_session_active(church):
            raise UnauthorizedError(
                "Kiosk session has expired. An administrator must start a new session.",
                kioskSessionExpired=True,
            )
        AttendanceService._event_or_none(event_id, church.id)
        member = MemberRepository.find_in_church(member_id, church.id)
        if not member:
            raise NotFoundError("Member not found")

        record = AttendanceService.check_in(
            church.id, member=member, event_id=event_id, method=CheckInMethod.KIOSK.value
        )
        return {
            "success": True,
            "message": f"Welcome, {member.first_name}!",
            "record": record.to_dict(),
            "member": member.to_dict(),
        }

    @staticmethod
    def delete_record(record_id, church_id):
        record = AttendanceRepository.find_in_church(record_id, church_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        AttendanceRepository.delete(record)
        logger.info(f"Attendance record {record_id} deleted")

    @staticmethod
    def get_today(church_id):
        records = AttendanceRepository.for_date(church_id, today())
        return [r.to_dict(include_attendee=True) for r in records]

    @staticmethod
    def get_stats(church_id, day=None):
        records = AttendanceRepository.for_date(church_id, day or today())
        return {"total": len(records), **demographic_counts(records)}

    @staticmethod
    def get_history(church_id, start, end, member_id=None, gender=None, age_group=None,
                    is_current_member=None):
        if end < start:
            raise ValidationError("End date cannot be before start date")
        records = AttendanceRepository.history(
            church_id,
            start,
            end,
            member_id=member_id,
            gender=gender,
            age_group=age_group,
            is_current_member=is_current_member,
        )
        return [r.to_dict(include_attendee=True) for r in records]

    @staticmethod
    def get_date_range(church_id):
        earliest, latest = AttendanceRepository.date_range(church_id)
        fallback = today()
        return {
            "earliest": isoformat(earliest or fallback),
            "latest": isoformat(latest or fallback),
        }

    @staticmethod
    def get_stats_range(church_id, start, end):
        records = AttendanceRepository.in_range(church_id, start, end)
        total_days = len({r.attendance_date for r in records})
        total = len(records)
        counts = demographic_counts(records)
        return {
            "totalDays": total_days,
            "totalAttendance": total,
            "averagePerDay": round(total / total_days, 2) if total_days else 0,
            "memberAttendance": sum(1 for r in records if r.member_id is not None),
            "visitorAttendance": sum(1 for r in records if r.visitor_id is not None),
            "genderBreakdown": {"male": counts["male"], "female": counts["female"]},
            "ageGroupBreakdown": {
                "child": counts["child"],
                "adolescent": counts["adolescent"],
                "adult": counts["adult"],
            },
        }

    @staticmethod
    def family_check_in(church_id, parent_id, event_id=None, children_ids=None):
        """Check in a parent and their children.

        ``children_ids=None`` means every child on record; members already checked
        in today are skipped and reported rather than failing the whole family.
        """
        AttendanceService._event_or_none(event_id, church_id)
        parent = MemberRepository.find_in_church(parent_id, church_id)
        if not parent:
            raise NotFoundError("Parent not found")

        if children_ids is None:
            children = MemberRepository.children_of(parent.id, church_id)
        else:
            children = []
            for child_id in children_ids:
                child = MemberRepository.find_in_church(child_id, church_id)
                if child:
                    children.append(child)

        created = []
        already_checked_in = []
        checked_in_children = []
        for person in [parent] + children:
            try:
                AttendanceService.check_in(
                    church_id,
                    member=person,
                    event_id=event_id,
                    method=CheckInMethod.FAMILY.value,
                )
            except DuplicateCheckInError:
                already_checked_in.append(person.to_dict())
                continue
            created.append(person)
            if person is not parent:
                checked_in_children.append(person.to_dict())

        return {
            "success": True,
            "parent": parent.to_dict(),
            "children": checked_in_children,
            "attendanceRecords": len(created),
            "alreadyCheckedIn": already_checked_in,
        }

    @staticmethod
    def move_visitor_attendance(visitor, member):
        """Re-point a visitor's attendance rows at ``member``; returns rows moved."""
        moved = 0
        for record in AttendanceRepository.for_visitor(visitor.id, visitor.church_id):
            clash = AttendanceRepository.find_duplicate(
                record.church_id,
                record.attendance_date,
                member_id=member.id,
                event_id=record.event_id,
            )
            if clash:
                db.session.delete(record)
                continue
            record.member_id = member.id
            record.visitor_id = None
            record.is_guest = False
            moved += 1
        db.session.commit()
        return moved

    @staticmethod
    def fix_visitor_member_records(church_id):
        updated = 0
        for visitor in VisitorRepository.list_for_church(church_id):
            parts = visitor.name.strip().split()
            if len(parts) < 2:
                continue
            member = MemberRepository.find_by_name(parts[0], " ".join(parts[1:]), church_id)
            if not member:
                continue
            updated += AttendanceService.move_visitor_attendance(visitor, member)

        logger.info(f"Moved {updated} visitor attendance records to members in church {church_id}")
        return {
            "success": True,
            "message": f"Updated {updated} attendance records from visitor to member status",
            "updatedCount": updated,
        }

    @staticmethod
    def scan_fingerprint(church_id, fingerprint_id=None, device_id=None):
        scanned_id = fingerprint_id or f"fp_mock_{device_id or 'unknown'}"
        member = MemberRepository.find_by_fingerprint(scanned_id, church_id)
        if not member:
            return {
                "member": None,
                "checkInSuccess": False,
                "scannedFingerprintId": scanned_id,
                "message": "Fingerprint not recognized",
            }

        try:
            AttendanceService.check_in(
                church_id, member=member, method=CheckInMethod.FINGERPRINT.value
            )
        except DuplicateCheckInError:
            return {
                "member": member.to_dict(),
                "checkInSuccess": False,
                "isDuplicate": True,
                "message": DUPLICATE_MESSAGE,
            }
        return {
            "member": member.to_dict(),
            "checkInSuccess": True,
            "message": "Check-in successful",
        }
